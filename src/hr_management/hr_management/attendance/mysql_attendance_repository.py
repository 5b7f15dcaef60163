from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..core.exceptions import DuplicateAttendance
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    duration_to_seconds,
    fetchall,
    fetchone,
    normalize_mysql_time,
    seconds_to_duration,
    translate_duplicate,
)
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, clock_in, clock_out, break_seconds,
    worked_hours, overtime_hours, notes, created_at, created_by, updated_at, updated_by
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        clock_in=normalize_mysql_time(r.get("clock_in")),
        clock_out=normalize_mysql_time(r.get("clock_out")),
        break_duration=seconds_to_duration(r.get("break_seconds")),
        worked_hours=Decimal(r.get("worked_hours") or 0),
        overtime_hours=Decimal(r.get("overtime_hours") or 0),
        notes=r.get("notes"),
        created_at=r.get("created_at"),
        created_by=r.get("created_by"),
        updated_at=r.get("updated_at"),
        updated_by=r.get("updated_by"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendances WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_all(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendances ORDER BY work_date DESC, employee_id ASC")
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_employee(self, employee_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendances WHERE employee_id=%s ORDER BY work_date DESC",
                (int(employee_id),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendances WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_by_date_range(self, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendances
                WHERE work_date BETWEEN %s AND %s
                ORDER BY work_date ASC, employee_id ASC
                """,
                (start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def add(self, record: AttendanceRecord) -> int:
        with translate_duplicate(lambda: DuplicateAttendance(record.employee_id, record.work_date)):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendances(
                        employee_id, work_date, clock_in, clock_out, break_seconds,
                        worked_hours, overtime_hours, notes, created_at, created_by, updated_at, updated_by
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(record.employee_id),
                        record.work_date,
                        record.clock_in,
                        record.clock_out,
                        duration_to_seconds(record.break_duration),
                        record.worked_hours,
                        record.overtime_hours,
                        record.notes,
                        record.created_at,
                        record.created_by,
                        record.updated_at,
                        record.updated_by,
                    ),
                )
                return int(cur.lastrowid)

    def update(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET clock_in=%s, clock_out=%s, break_seconds=%s, worked_hours=%s, overtime_hours=%s,
                    notes=%s, updated_at=%s, updated_by=%s
                WHERE attendance_id=%s
                """,
                (
                    record.clock_in,
                    record.clock_out,
                    duration_to_seconds(record.break_duration),
                    record.worked_hours,
                    record.overtime_hours,
                    record.notes,
                    record.updated_at,
                    record.updated_by,
                    int(record.attendance_id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendances WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0
