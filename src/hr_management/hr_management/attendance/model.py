from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

ZERO_HOURS = Decimal("0.00")


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per employee per calendar date."""

    attendance_id: int
    employee_id: int
    work_date: date
    clock_in: Optional[time] = None
    clock_out: Optional[time] = None
    break_duration: Optional[timedelta] = None
    worked_hours: Decimal = ZERO_HOURS
    overtime_hours: Decimal = ZERO_HOURS
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None


@dataclass(frozen=True)
class NewAttendance:
    employee_id: int
    work_date: date
    clock_in: Optional[time] = None
    clock_out: Optional[time] = None
    break_duration: Optional[timedelta] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AttendancePatch:
    """Fields left as ``None`` keep their stored value."""

    clock_in: Optional[time] = None
    clock_out: Optional[time] = None
    break_duration: Optional[timedelta] = None
    notes: Optional[str] = None
