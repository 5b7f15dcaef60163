from __future__ import annotations

from datetime import date, time, timedelta
from decimal import Decimal

import pytest

from src.hr_management.hr_management.attendance.model import NewAttendance
from src.hr_management.hr_management.bulk.excel import read_sheet, write_sheet
from src.hr_management.hr_management.core.exceptions import ImportFailed

COLUMNS = ("EmployeeId", "Date", "ClockIn", "ClockOut", "BreakDuration", "Notes")


@pytest.fixture
def service(container):
    return container.attendance_service


def _row(employee, day, **overrides):
    row = {
        "EmployeeId": str(employee.employee_id),
        "Date": day,
        "ClockIn": "09:00",
        "ClockOut": "18:00",
        "BreakDuration": "01:00",
        "Notes": "",
    }
    row.update(overrides)
    return row


def test_bad_row_is_reported_and_the_rest_are_kept(service, employee, attendance_repo):
    days = ["2025-03-03", "2025-03-04", "2025-03-05", "2025-03-06", "2025-03-07"]
    rows = [_row(employee, day) for day in days]
    rows[2] = _row(employee, "not-a-date")

    with pytest.raises(ImportFailed) as exc:
        service.import_file(write_sheet(rows, "Attendances", columns=COLUMNS))

    assert exc.value.errors == {"Row 4": ["Invalid date 'not-a-date'"]}
    saved = attendance_repo.list_all()
    assert sorted(r.work_date for r in saved) == [
        date(2025, 3, 3),
        date(2025, 3, 4),
        date(2025, 3, 6),
        date(2025, 3, 7),
    ]
    assert all(r.worked_hours == Decimal("8.00") for r in saved)


def test_duplicate_day_in_sheet_is_rejected(service, employee, attendance_repo):
    rows = [_row(employee, "2025-03-03"), _row(employee, "03/03/2025", Notes="again")]

    with pytest.raises(ImportFailed) as exc:
        service.import_file(write_sheet(rows, "Attendances", columns=COLUMNS))

    assert list(exc.value.errors) == ["Row 3"]
    assert len(attendance_repo.list_all()) == 1


def test_overflowing_break_is_a_row_error(service, employee, attendance_repo):
    rows = [_row(employee, "2025-03-03", BreakDuration="inf")]

    with pytest.raises(ImportFailed) as exc:
        service.import_file(write_sheet(rows, "Attendances", columns=COLUMNS))

    assert exc.value.errors == {"Row 2": ["Invalid break duration 'inf'"]}
    assert attendance_repo.list_all() == []


def test_export_lists_every_record(service, employee):
    service.create(
        NewAttendance(
            employee_id=employee.employee_id,
            work_date=date(2025, 3, 3),
            clock_in=time(9, 0),
            clock_out=time(19, 30),
            break_duration=timedelta(minutes=30),
            notes="Release day",
        )
    )

    sheet = read_sheet(service.export_excel())

    assert sheet.columns == (
        "attendanceid",
        "employeeid",
        "date",
        "clockin",
        "clockout",
        "breakduration",
        "workedhours",
        "overtimehours",
        "notes",
    )
    [row] = sheet.rows
    assert row["employeeid"] == str(employee.employee_id)
    assert row["date"] == "2025-03-03"
    assert row["clockin"] == "09:00:00"
    assert row["clockout"] == "19:30:00"
    assert row["breakduration"] == "00:30:00"
    assert float(row["workedhours"]) == 10.0
    assert float(row["overtimehours"]) == 2.0
    assert row["notes"] == "Release day"
