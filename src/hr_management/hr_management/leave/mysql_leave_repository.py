from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRequestRepository

_COLUMNS = """
    leave_request_id, employee_id, leave_type, start_date, end_date, days_requested, reason,
    status, reviewed_by, reviewed_at, manager_comments, created_at, created_by, updated_at, updated_by
"""


def _to_request(r: Dict[str, Any]) -> LeaveRequest:
    return LeaveRequest(
        leave_request_id=int(r["leave_request_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(int(r["leave_type"])),
        start_date=r["start_date"],
        end_date=r["end_date"],
        days_requested=int(r["days_requested"]),
        reason=r.get("reason") or "",
        status=LeaveStatus(r["status"]),
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        manager_comments=r.get("manager_comments"),
        created_at=r.get("created_at"),
        created_by=r.get("created_by"),
        updated_at=r.get("updated_at"),
        updated_by=r.get("updated_by"),
    )


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _list(self, where: str = "1=1", params: tuple = (), order: str = "created_at DESC") -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE {where} ORDER BY {order}", params)
            return [_to_request(r) for r in fetchall(cur)]

    def get_by_id(self, leave_request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE leave_request_id=%s", (int(leave_request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_all(self) -> Sequence[LeaveRequest]:
        return self._list()

    def list_for_employee(self, employee_id: int) -> Sequence[LeaveRequest]:
        return self._list("employee_id=%s", (int(employee_id),), order="start_date DESC")

    def list_by_status(self, status: LeaveStatus) -> Sequence[LeaveRequest]:
        return self._list("status=%s", (status.value,))

    def list_pending(self) -> Sequence[LeaveRequest]:
        return self._list("status=%s", (LeaveStatus.PENDING.value,), order="created_at ASC")

    def list_overlapping(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
    ) -> Sequence[LeaveRequest]:
        values = [s.value for s in statuses]
        if not values:
            return []
        placeholders = ",".join(["%s"] * len(values))
        return self._list(
            f"employee_id=%s AND start_date<=%s AND end_date>=%s AND status IN ({placeholders})",
            (int(employee_id), end_date, start_date, *values),
            order="start_date ASC",
        )

    def add(self, request: LeaveRequest) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type, start_date, end_date, days_requested, reason, status,
                    created_at, created_by, updated_at, updated_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(request.employee_id),
                    int(request.leave_type),
                    request.start_date,
                    request.end_date,
                    int(request.days_requested),
                    request.reason,
                    request.status.value,
                    request.created_at,
                    request.created_by,
                    request.updated_at,
                    request.updated_by,
                ),
            )
            return int(cur.lastrowid)

    def update(self, request: LeaveRequest, *, expected_status: Optional[LeaveStatus] = None) -> bool:
        sql = """
            UPDATE leave_requests
            SET status=%s, reviewed_by=%s, reviewed_at=%s, manager_comments=%s, updated_at=%s, updated_by=%s
            WHERE leave_request_id=%s
        """
        params: list[object] = [
            request.status.value,
            request.reviewed_by,
            request.reviewed_at,
            request.manager_comments,
            request.updated_at,
            request.updated_by,
            int(request.leave_request_id),
        ]
        if expected_status is not None:
            sql += " AND status=%s"
            params.append(expected_status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return cur.rowcount > 0

    def delete(self, leave_request_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM leave_requests WHERE leave_request_id=%s", (int(leave_request_id),))
            return cur.rowcount > 0
