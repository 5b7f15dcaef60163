from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from src.hr_management.hr_management.common.datetime_utils import (
    as_date,
    format_duration,
    parse_duration,
    parse_time_of_day,
)
from src.hr_management.hr_management.common.validators import (
    require_email,
    validate_attendance_times,
    validate_leave_dates,
    validate_leave_type,
)
from src.hr_management.hr_management.core.enums import LeaveType
from src.hr_management.hr_management.core.exceptions import (
    InvalidAttendanceData,
    InvalidLeaveRequestData,
    ValidationError,
)
from src.hr_management.hr_management.web.payload import opt_decimal, opt_int


def test_email_is_normalised():
    assert require_email("  John.Doe@Example.COM ") == "john.doe@example.com"


@pytest.mark.parametrize("value", ["", "not-an-email", "a@b", "a b@c.com"])
def test_invalid_email(value):
    with pytest.raises(ValidationError):
        require_email(value)


def test_attendance_times_equal_is_rejected():
    with pytest.raises(InvalidAttendanceData):
        validate_attendance_times(time(9, 0), time(9, 0), None)


def test_negative_break_is_rejected():
    with pytest.raises(InvalidAttendanceData):
        validate_attendance_times(time(9, 0), time(17, 0), timedelta(minutes=-5))


def test_open_attendance_is_valid():
    validate_attendance_times(time(9, 0), None, None)


def test_leave_dates_compare_calendar_days():
    now = datetime(2025, 3, 1, 23, 59)

    validate_leave_dates(date(2025, 3, 1), date(2025, 3, 1), now)
    with pytest.raises(InvalidLeaveRequestData):
        validate_leave_dates(date(2025, 2, 28), date(2025, 3, 1), now)


@pytest.mark.parametrize(
    "raw, expected",
    [(LeaveType.SICK, LeaveType.SICK), (0, LeaveType.ANNUAL), ("3", LeaveType.MATERNITY), ("unpaid", LeaveType.UNPAID)],
)
def test_leave_type_parsing(raw, expected):
    assert validate_leave_type(raw) is expected


@pytest.mark.parametrize("raw", [None, True, 9, "holiday"])
def test_leave_type_rejects_unknown(raw):
    with pytest.raises(InvalidLeaveRequestData):
        validate_leave_type(raw)


@pytest.mark.parametrize(
    "raw",
    ["15/03/2025", "2025-03-15", "03/15/2025", "15-03-2025", "2025-03-15T08:30:00", "15/03/2025 08:30"],
)
def test_import_date_formats(raw):
    assert as_date(raw) == date(2025, 3, 15)


def test_unparseable_date():
    assert as_date("March fifteenth") is None


def test_time_and_duration_parsing():
    assert parse_time_of_day("08:30") == time(8, 30)
    assert parse_duration("01:15:00") == timedelta(hours=1, minutes=15)
    assert parse_duration("45") == timedelta(minutes=45)
    assert format_duration(timedelta(hours=1, minutes=5, seconds=9)) == "01:05:09"


@pytest.mark.parametrize("text", ["inf", "-inf", "nan", "1e20", "99999999999:00"])
def test_unrepresentable_durations_are_rejected(text):
    assert parse_duration(text) is None


def test_payload_integers_must_be_whole():
    assert opt_int({"gender": 2.0}, "gender") == 2
    assert opt_int({"gender": "2"}, "gender") == 2
    with pytest.raises(ValidationError):
        opt_int({"gender": 1.9}, "gender")
    with pytest.raises(ValidationError):
        opt_int({"gender": "1.9"}, "gender")


@pytest.mark.parametrize("raw", ["NaN", "Infinity", "-Infinity", "abc"])
def test_payload_decimals_must_be_finite(raw):
    with pytest.raises(ValidationError):
        opt_decimal({"salary": raw}, "salary")
