from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    """Domain entity: a leave request and its review outcome."""

    leave_request_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    days_requested: int
    status: LeaveStatus
    reason: str = ""
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    manager_comments: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    def overlaps(self, start: date, end: date) -> bool:
        return self.start_date <= end and start <= self.end_date


@dataclass(frozen=True)
class NewLeaveRequest:
    employee_id: int
    leave_type: Union[LeaveType, int, str]
    start_date: Union[date, datetime]
    end_date: Union[date, datetime]
    reason: str = ""


@dataclass(frozen=True)
class LeavePatch:
    """Administrative correction; ``status`` is applied as given."""

    status: Optional[Union[LeaveStatus, int, str]] = None
    manager_comments: Optional[str] = None
