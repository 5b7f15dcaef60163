"""Leave request lifecycle.

Pending is the only state with outgoing transitions; Approved and Rejected
are terminal for the approve/reject operations.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, FrozenSet, Union

from ..core.enums import LeaveStatus
from ..core.exceptions import InvalidLeaveRequestData, InvalidLeaveStatusTransition

INITIAL_STATUS = LeaveStatus.PENDING

ALLOWED_TRANSITIONS: Dict[LeaveStatus, FrozenSet[LeaveStatus]] = {
    LeaveStatus.PENDING: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED}),
    LeaveStatus.APPROVED: frozenset(),
    LeaveStatus.REJECTED: frozenset(),
}

# Integer codes used by older clients and spreadsheets.
_STATUS_CODES = {0: LeaveStatus.PENDING, 1: LeaveStatus.APPROVED, 2: LeaveStatus.REJECTED}


def can_transition(current: LeaveStatus, target: LeaveStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def require_transition(current: LeaveStatus, target: LeaveStatus) -> None:
    if not can_transition(current, target):
        raise InvalidLeaveStatusTransition(current, target)


def is_terminal(status: LeaveStatus) -> bool:
    return not ALLOWED_TRANSITIONS[status]


def parse_leave_status(value: Union[LeaveStatus, int, str]) -> LeaveStatus:
    if isinstance(value, LeaveStatus):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        if value in _STATUS_CODES:
            return _STATUS_CODES[value]
        raise InvalidLeaveRequestData(f"Invalid leave status: {value}")

    text = str(value or "").strip()
    if text.isdigit():
        return parse_leave_status(int(text))
    for status in LeaveStatus:
        if status.value.lower() == text.lower():
            return status
    raise InvalidLeaveRequestData(f"Invalid leave status: {text!r}")


def days_requested(start: date, end: date) -> int:
    """Inclusive day count."""
    return (end - start).days + 1
