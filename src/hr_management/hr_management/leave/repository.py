from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveRequest


class LeaveRequestRepository(Protocol):
    def get_by_id(self, leave_request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_all(self) -> Sequence[LeaveRequest]:
        """Newest first."""

        raise NotImplementedError

    def list_for_employee(self, employee_id: int) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_by_status(self, status: LeaveStatus) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_pending(self) -> Sequence[LeaveRequest]:
        """Oldest first, so reviewers work the queue in order."""

        raise NotImplementedError

    def list_overlapping(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def add(self, request: LeaveRequest) -> int:
        raise NotImplementedError

    def update(self, request: LeaveRequest, *, expected_status: Optional[LeaveStatus] = None) -> bool:
        """Persist ``request``.

        With ``expected_status`` the write only happens while the stored row
        still has that status; returns ``False`` otherwise.
        """

        raise NotImplementedError

    def delete(self, leave_request_id: int) -> bool:
        raise NotImplementedError
