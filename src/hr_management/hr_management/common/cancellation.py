from __future__ import annotations

from threading import Event
from typing import Optional

from ..core.exceptions import OperationCancelled


def raise_if_cancelled(cancel: Optional[Event], operation: str = "operation") -> None:
    """Checked between store calls of multi-step operations."""

    if cancel is not None and cancel.is_set():
        raise OperationCancelled(f"The {operation} was cancelled.")
