from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Optional, Type, Union

from ..core.enums import LeaveType
from ..core.exceptions import InvalidAttendanceData, InvalidLeaveRequestData, ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str, field_name: str, *, error: Type[ValidationError] = ValidationError) -> str:
    if not value or not value.strip():
        raise error(f"{field_name} is required")
    return value.strip()


def require_min_length(
    value: str, field_name: str, min_len: int, *, error: Type[ValidationError] = ValidationError
) -> str:
    if value is None or len(value) < min_len:
        raise error(f"{field_name} must be at least {min_len} characters")
    return value


def require_length_between(
    value: str, field_name: str, min_len: int, max_len: int, *, error: Type[ValidationError] = ValidationError
) -> str:
    if value is None or not (min_len <= len(value) <= max_len):
        raise error(f"{field_name} must be between {min_len} and {max_len} characters")
    return value


def require_email(value: str, field_name: str = "Email", *, error: Type[ValidationError] = ValidationError) -> str:
    value = require_non_empty(value, field_name, error=error)
    if not _EMAIL_RE.match(value):
        raise error(f"{field_name} must be a valid email address")
    return value.lower()


def validate_attendance_times(
    clock_in: Optional[time],
    clock_out: Optional[time],
    break_duration: Optional[timedelta],
) -> None:
    if clock_in is not None and clock_out is not None and clock_out <= clock_in:
        raise InvalidAttendanceData("Clock-out time must be later than clock-in time.")
    if break_duration is not None and break_duration < timedelta(0):
        raise InvalidAttendanceData("Break duration cannot be negative.")


def validate_leave_dates(start: date, end: date, now: datetime) -> None:
    """Start may not lie before today and the range may not be inverted.

    Both bounds are compared as calendar dates.
    """

    if start < now.date():
        raise InvalidLeaveRequestData("Start date cannot be in the past.")
    if end < start:
        raise InvalidLeaveRequestData("End date cannot be before start date.")


def validate_leave_type(value: Union[LeaveType, int, str, None]) -> LeaveType:
    if isinstance(value, LeaveType):
        return value
    if value is None:
        raise InvalidLeaveRequestData("Leave type is required.")
    if isinstance(value, bool):
        raise InvalidLeaveRequestData(f"Invalid leave type: {value!r}")
    if isinstance(value, int):
        try:
            return LeaveType(value)
        except ValueError:
            raise InvalidLeaveRequestData(f"Invalid leave type: {value}")

    text = str(value).strip()
    if text.lstrip("-").isdigit():
        return validate_leave_type(int(text))
    try:
        return LeaveType[text.upper()]
    except KeyError:
        raise InvalidLeaveRequestData(f"Invalid leave type: {text!r}")
