from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from threading import Event
from typing import BinaryIO, Callable, List, Mapping, Optional, Sequence, Union

import structlog

from ..bulk.excel import read_sheet, write_sheet
from ..bulk.reconciliation import RowRejected, cell_int, cell_text, reconcile
from ..common.datetime_utils import as_date, format_duration, now_utc, parse_duration, parse_time_of_day
from ..common.validators import validate_attendance_times
from ..core.constants import SERVICE_ACCOUNT
from ..core.exceptions import (
    AlreadyClockedIn,
    AttendanceNotFound,
    DuplicateAttendance,
    EmployeeNotFound,
    InvalidDateRange,
    NotClockedIn,
    NotFoundError,
)
from ..employees.repository import EmployeeRepository
from .calculator.base import WorkedHoursCalculator
from .calculator.standard_calculator import StandardWorkdayCalculator
from .model import ZERO_HOURS, AttendancePatch, AttendanceRecord, NewAttendance
from .repository import AttendanceRepository

logger = structlog.get_logger(__name__)

IMPORT_REQUIRED_COLUMNS = ("employeeid", "date")
EXPORT_COLUMNS = (
    "AttendanceId",
    "EmployeeId",
    "Date",
    "ClockIn",
    "ClockOut",
    "BreakDuration",
    "WorkedHours",
    "OvertimeHours",
    "Notes",
)


class AttendanceService:
    """Use case: record attendance and derive worked/overtime hours."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        calculator: Optional[WorkedHoursCalculator] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._employees = employees
        self._calculator = calculator or StandardWorkdayCalculator()
        self._clock = clock

    # -------- queries --------
    def list_all(self) -> Sequence[AttendanceRecord]:
        return self._attendance.list_all()

    def get_by_id(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise AttendanceNotFound(attendance_id)
        return record

    def list_for_employee(self, employee_id: int) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_employee(int(employee_id))

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> AttendanceRecord:
        record = self._attendance.get_for_employee_and_date(int(employee_id), work_date)
        if not record:
            raise NotFoundError(
                f"No attendance for employee {employee_id} on {work_date:%Y-%m-%d}.",
                code=AttendanceNotFound.code,
            )
        return record

    def list_by_date_range(self, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        if end_date < start_date:
            raise InvalidDateRange(start_date, end_date)
        return self._attendance.list_by_date_range(start_date=start_date, end_date=end_date)

    # -------- commands --------
    def create(self, data: NewAttendance, *, actor: str = SERVICE_ACCOUNT) -> AttendanceRecord:
        if not self._employees.get_by_id(int(data.employee_id)):
            raise EmployeeNotFound(data.employee_id)

        if self._attendance.get_for_employee_and_date(int(data.employee_id), data.work_date):
            raise DuplicateAttendance(data.employee_id, data.work_date)

        validate_attendance_times(data.clock_in, data.clock_out, data.break_duration)

        now = self._clock()
        record = AttendanceRecord(
            attendance_id=0,
            employee_id=int(data.employee_id),
            work_date=data.work_date,
            clock_in=data.clock_in,
            clock_out=data.clock_out,
            break_duration=data.break_duration,
            notes=data.notes,
            created_at=now,
            created_by=actor,
            updated_at=now,
            updated_by=actor,
        )
        record = self._with_hours(record)

        attendance_id = self._attendance.add(record)
        logger.info(
            "attendance_created",
            attendance_id=attendance_id,
            employee_id=record.employee_id,
            work_date=record.work_date.isoformat(),
            actor=actor,
        )
        return replace(record, attendance_id=attendance_id)

    def update(self, attendance_id: int, patch: AttendancePatch, *, actor: str = SERVICE_ACCOUNT) -> AttendanceRecord:
        existing = self.get_by_id(attendance_id)

        merged = replace(
            existing,
            clock_in=patch.clock_in if patch.clock_in is not None else existing.clock_in,
            clock_out=patch.clock_out if patch.clock_out is not None else existing.clock_out,
            break_duration=patch.break_duration if patch.break_duration is not None else existing.break_duration,
            notes=patch.notes if patch.notes is not None else existing.notes,
        )
        validate_attendance_times(merged.clock_in, merged.clock_out, merged.break_duration)

        merged = replace(self._with_hours(merged), updated_at=self._clock(), updated_by=actor)
        self._attendance.update(merged)
        logger.info("attendance_updated", attendance_id=merged.attendance_id, actor=actor)
        return merged

    def delete(self, attendance_id: int, *, actor: str = SERVICE_ACCOUNT) -> None:
        self.get_by_id(attendance_id)
        self._attendance.delete(int(attendance_id))
        logger.info("attendance_deleted", attendance_id=int(attendance_id), actor=actor)

    def clock_in(self, employee_id: int, *, at: Optional[datetime] = None, actor: str = SERVICE_ACCOUNT) -> AttendanceRecord:
        if not self._employees.get_by_id(int(employee_id)):
            raise EmployeeNotFound(employee_id)

        moment = (at or self._clock()).replace(microsecond=0)
        existing = self._attendance.get_for_employee_and_date(int(employee_id), moment.date())
        if existing and existing.clock_in is not None:
            raise AlreadyClockedIn(employee_id)

        if existing:
            return self.update(existing.attendance_id, AttendancePatch(clock_in=moment.time()), actor=actor)
        return self.create(
            NewAttendance(employee_id=int(employee_id), work_date=moment.date(), clock_in=moment.time()),
            actor=actor,
        )

    def clock_out(self, employee_id: int, *, at: Optional[datetime] = None, actor: str = SERVICE_ACCOUNT) -> AttendanceRecord:
        moment = (at or self._clock()).replace(microsecond=0)
        existing = self._attendance.get_for_employee_and_date(int(employee_id), moment.date())
        if not existing or existing.clock_in is None:
            raise NotClockedIn(employee_id)
        if existing.clock_out is not None:
            raise NotClockedIn(employee_id, f"Employee {employee_id} has already clocked out.")

        return self.update(existing.attendance_id, AttendancePatch(clock_out=moment.time()), actor=actor)

    # -------- import / export --------
    def import_file(
        self,
        source: Union[BinaryIO, bytes],
        *,
        actor: str = SERVICE_ACCOUNT,
        cancel: Optional[Event] = None,
    ) -> List[AttendanceRecord]:
        sheet = read_sheet(source)
        return reconcile(
            sheet,
            lambda row: self.create(self._parse_row(row), actor=actor),
            required_columns=IMPORT_REQUIRED_COLUMNS,
            entity="attendance",
            cancel=cancel,
        )

    def export_excel(self) -> bytes:
        rows = [
            {
                "AttendanceId": r.attendance_id,
                "EmployeeId": r.employee_id,
                "Date": r.work_date.isoformat(),
                "ClockIn": r.clock_in.strftime("%H:%M:%S") if r.clock_in else "",
                "ClockOut": r.clock_out.strftime("%H:%M:%S") if r.clock_out else "",
                "BreakDuration": format_duration(r.break_duration),
                "WorkedHours": float(r.worked_hours),
                "OvertimeHours": float(r.overtime_hours),
                "Notes": r.notes or "",
            }
            for r in self._attendance.list_all()
        ]
        return write_sheet(rows, "Attendances", columns=EXPORT_COLUMNS)

    # -------- helpers --------
    def _with_hours(self, record: AttendanceRecord) -> AttendanceRecord:
        worked = self._calculator.compute(record.clock_in, record.clock_out, record.break_duration)
        if worked is None:
            if record.attendance_id:
                return record
            return replace(record, worked_hours=ZERO_HOURS, overtime_hours=ZERO_HOURS)
        return replace(record, worked_hours=worked.worked_hours, overtime_hours=worked.overtime_hours)

    @staticmethod
    def _parse_row(row: Mapping[str, str]) -> NewAttendance:
        messages: List[str] = []

        employee_id = cell_int(row, "employeeid")
        if employee_id is None:
            messages.append(f"Invalid EmployeeId '{cell_text(row, 'employeeid')}'")

        work_date = as_date(cell_text(row, "date"))
        if work_date is None:
            messages.append(f"Invalid date '{cell_text(row, 'date')}'")

        clock_in = parse_time_of_day(cell_text(row, "clockin"))
        if cell_text(row, "clockin") and clock_in is None:
            messages.append(f"Invalid clock-in time '{cell_text(row, 'clockin')}'")

        clock_out = parse_time_of_day(cell_text(row, "clockout"))
        if cell_text(row, "clockout") and clock_out is None:
            messages.append(f"Invalid clock-out time '{cell_text(row, 'clockout')}'")

        break_duration = parse_duration(cell_text(row, "breakduration"))
        if cell_text(row, "breakduration") and break_duration is None:
            messages.append(f"Invalid break duration '{cell_text(row, 'breakduration')}'")

        if messages:
            raise RowRejected(messages)

        return NewAttendance(
            employee_id=employee_id,
            work_date=work_date,
            clock_in=clock_in,
            clock_out=clock_out,
            break_duration=break_duration,
            notes=cell_text(row, "notes") or None,
        )
