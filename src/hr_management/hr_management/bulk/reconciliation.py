"""Row-by-row reconciliation for spreadsheet imports.

Each data row is handled on its own: a failing row is recorded under
``"Row N"`` (N counts the header as row 1) and processing continues. Rows that
succeed are persisted immediately by their handler, so a failed import still
leaves the good rows committed. Once the whole batch has been visited, any
recorded failure is raised as a single ``ImportFailed``.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from threading import Event
from typing import Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

import structlog

from ..common.cancellation import raise_if_cancelled
from ..core.exceptions import DomainError, ImportFailed, OperationCancelled, ValidationError
from .excel import Sheet

logger = structlog.get_logger(__name__)

T = TypeVar("T")

GENERAL_KEY = "General"


class RowRejected(ValidationError):
    """A row failed several field checks at once."""

    def __init__(self, messages: Sequence[str]):
        super().__init__("; ".join(messages))
        self.messages = list(messages)


def row_key(index: int) -> str:
    return f"Row {index + 2}"


def reconcile(
    sheet: Sheet,
    handler: Callable[[Mapping[str, str]], T],
    *,
    required_columns: Sequence[str] = (),
    entity: str = "rows",
    cancel: Optional[Event] = None,
) -> List[T]:
    missing = [c for c in required_columns if c not in sheet.columns]
    if missing:
        raise ImportFailed({GENERAL_KEY: [f"Missing required columns: {', '.join(missing)}"]})

    created: List[T] = []
    errors: Dict[str, List[str]] = {}

    for index, row in enumerate(sheet.rows):
        raise_if_cancelled(cancel, "import")
        try:
            created.append(handler(row))
        except OperationCancelled:
            raise
        except RowRejected as exc:
            errors[row_key(index)] = exc.messages
        except DomainError as exc:
            errors[row_key(index)] = [exc.message]
        except Exception as exc:
            logger.exception("import_row_crashed", entity=entity, row=index + 2)
            errors[row_key(index)] = [f"Unexpected error - {exc}"]

    if errors:
        logger.warning("import_failed", entity=entity, imported=len(created), failed=len(errors))
        raise ImportFailed(errors)

    logger.info("import_completed", entity=entity, imported=len(created))
    return created


# -------- cell parsing --------
def cell_int(row: Mapping[str, str], column: str) -> Optional[int]:
    text = (row.get(column) or "").strip()
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite() or number != number.to_integral_value():
        return None
    return int(number)


def cell_decimal(row: Mapping[str, str], column: str) -> Optional[Decimal]:
    text = (row.get(column) or "").strip()
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def cell_text(row: Mapping[str, str], column: str) -> str:
    return (row.get(column) or "").strip()
