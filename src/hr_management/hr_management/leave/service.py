from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from threading import Event
from typing import BinaryIO, Callable, List, Mapping, Optional, Sequence, Union

import structlog

from ..bulk.excel import read_sheet, write_sheet
from ..bulk.reconciliation import RowRejected, cell_int, cell_text, reconcile
from ..common.datetime_utils import as_date, now_utc
from ..common.validators import validate_leave_dates, validate_leave_type
from ..core.constants import DEFAULT_REJECT_COMMENT, SERVICE_ACCOUNT
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import (
    ConflictingLeaveRequest,
    EmployeeNotFound,
    InsufficientLeaveDays,
    InvalidLeaveRequestData,
    InvalidLeaveStatusTransition,
    LeaveRequestNotFound,
)
from ..employees.repository import EmployeeRepository
from .model import LeavePatch, LeaveRequest, NewLeaveRequest
from .repository import LeaveRequestRepository
from .state_machine import INITIAL_STATUS, days_requested, is_terminal, parse_leave_status, require_transition

logger = structlog.get_logger(__name__)

# Requests in these states hold the employee's calendar and allowance.
BLOCKING_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED)

IMPORT_REQUIRED_COLUMNS = ("employeeid", "leavetype", "startdate", "enddate")
EXPORT_COLUMNS = (
    "LeaveRequestId",
    "EmployeeId",
    "LeaveType",
    "StartDate",
    "EndDate",
    "DaysRequested",
    "Reason",
    "Status",
    "ReviewedBy",
    "ReviewedAt",
    "ManagerComments",
)


def _as_day(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


class LeaveRequestService:
    """Use case: submit leave requests and move them through review."""

    def __init__(
        self,
        leave_requests: LeaveRequestRepository,
        employees: EmployeeRepository,
        *,
        annual_leave_allowance: Optional[int] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._requests = leave_requests
        self._employees = employees
        self._annual_allowance = annual_leave_allowance
        self._clock = clock

    # -------- queries --------
    def list_all(self) -> Sequence[LeaveRequest]:
        return self._requests.list_all()

    def get_by_id(self, leave_request_id: int) -> LeaveRequest:
        request = self._requests.get_by_id(int(leave_request_id))
        if not request:
            raise LeaveRequestNotFound(leave_request_id)
        return request

    def list_for_employee(self, employee_id: int) -> Sequence[LeaveRequest]:
        return self._requests.list_for_employee(int(employee_id))

    def list_by_status(self, status: Union[LeaveStatus, int, str]) -> Sequence[LeaveRequest]:
        return self._requests.list_by_status(parse_leave_status(status))

    def list_pending(self) -> Sequence[LeaveRequest]:
        return self._requests.list_pending()

    # -------- lifecycle --------
    def create(self, data: NewLeaveRequest, *, actor: str = SERVICE_ACCOUNT) -> LeaveRequest:
        if data.start_date is None or data.end_date is None:
            raise InvalidLeaveRequestData("Start date and end date are required.")

        if not self._employees.get_by_id(int(data.employee_id)):
            raise EmployeeNotFound(data.employee_id)

        leave_type = validate_leave_type(data.leave_type)
        start, end = _as_day(data.start_date), _as_day(data.end_date)
        now = self._clock()
        validate_leave_dates(start, end, now)

        days = days_requested(start, end)

        overlapping = self._requests.list_overlapping(
            employee_id=int(data.employee_id),
            start_date=start,
            end_date=end,
            statuses=BLOCKING_STATUSES,
        )
        if overlapping:
            raise ConflictingLeaveRequest(start, end)

        if leave_type == LeaveType.ANNUAL and self._annual_allowance is not None:
            self._check_allowance(int(data.employee_id), start.year, days)

        request = LeaveRequest(
            leave_request_id=0,
            employee_id=int(data.employee_id),
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            days_requested=days,
            status=INITIAL_STATUS,
            reason=(data.reason or "").strip(),
            created_at=now,
            created_by=actor,
            updated_at=now,
            updated_by=actor,
        )
        leave_request_id = self._requests.add(request)
        logger.info(
            "leave_request_created",
            leave_request_id=leave_request_id,
            employee_id=request.employee_id,
            days_requested=days,
            actor=actor,
        )
        return replace(request, leave_request_id=leave_request_id)

    def approve(self, leave_request_id: int, approved_by: str, comments: Optional[str] = None) -> LeaveRequest:
        return self._review(leave_request_id, LeaveStatus.APPROVED, approved_by, comments)

    def reject(self, leave_request_id: int, rejected_by: str, comments: Optional[str] = None) -> LeaveRequest:
        return self._review(leave_request_id, LeaveStatus.REJECTED, rejected_by, comments or DEFAULT_REJECT_COMMENT)

    def update(self, leave_request_id: int, patch: LeavePatch, *, actor: str = SERVICE_ACCOUNT) -> LeaveRequest:
        """Administrative correction.

        A supplied status is written as-is, without the approve/reject guard.
        """

        request = self.get_by_id(leave_request_id)
        changes = {}

        if patch.status is not None:
            status = parse_leave_status(patch.status)
            if status != request.status and is_terminal(request.status):
                logger.warning(
                    "leave_status_forced",
                    leave_request_id=request.leave_request_id,
                    from_status=request.status.value,
                    to_status=status.value,
                    actor=actor,
                )
            changes["status"] = status
        if patch.manager_comments is not None:
            changes["manager_comments"] = patch.manager_comments

        request = replace(request, updated_at=self._clock(), updated_by=actor, **changes)
        self._requests.update(request)
        logger.info("leave_request_updated", leave_request_id=request.leave_request_id, actor=actor)
        return request

    def delete(self, leave_request_id: int, *, actor: str = SERVICE_ACCOUNT) -> None:
        request = self.get_by_id(leave_request_id)
        self._requests.delete(request.leave_request_id)
        logger.info(
            "leave_request_deleted",
            leave_request_id=request.leave_request_id,
            status=request.status.value,
            actor=actor,
        )

    # -------- import / export --------
    def import_file(
        self,
        source: Union[BinaryIO, bytes],
        *,
        actor: str = SERVICE_ACCOUNT,
        cancel: Optional[Event] = None,
    ) -> List[LeaveRequest]:
        sheet = read_sheet(source)
        return reconcile(
            sheet,
            lambda row: self.create(self._parse_row(row), actor=actor),
            required_columns=IMPORT_REQUIRED_COLUMNS,
            entity="leave_requests",
            cancel=cancel,
        )

    def export_excel(self) -> bytes:
        rows = [
            {
                "LeaveRequestId": r.leave_request_id,
                "EmployeeId": r.employee_id,
                "LeaveType": int(r.leave_type),
                "StartDate": r.start_date.isoformat(),
                "EndDate": r.end_date.isoformat(),
                "DaysRequested": r.days_requested,
                "Reason": r.reason,
                "Status": r.status.value,
                "ReviewedBy": r.reviewed_by or "",
                "ReviewedAt": r.reviewed_at.isoformat(sep=" ") if r.reviewed_at else "",
                "ManagerComments": r.manager_comments or "",
            }
            for r in self._requests.list_all()
        ]
        return write_sheet(rows, "LeaveRequests", columns=EXPORT_COLUMNS)

    # -------- helpers --------
    def _review(self, leave_request_id: int, target: LeaveStatus, reviewer: str, comments: Optional[str]) -> LeaveRequest:
        request = self.get_by_id(leave_request_id)
        require_transition(request.status, target)

        now = self._clock()
        reviewed = replace(
            request,
            status=target,
            reviewed_by=reviewer,
            reviewed_at=now,
            manager_comments=comments,
            updated_at=now,
            updated_by=reviewer,
        )
        if not self._requests.update(reviewed, expected_status=request.status):
            # Someone else reviewed it between our read and write.
            current = self.get_by_id(leave_request_id)
            raise InvalidLeaveStatusTransition(current.status, target)

        logger.info(
            f"leave_request_{target.value.lower()}",
            leave_request_id=reviewed.leave_request_id,
            status=target.value,
            reviewer=reviewer,
        )
        return reviewed

    def _check_allowance(self, employee_id: int, year: int, requested: int) -> None:
        used = sum(
            r.days_requested
            for r in self._requests.list_for_employee(employee_id)
            if r.leave_type == LeaveType.ANNUAL and r.status in BLOCKING_STATUSES and r.start_date.year == year
        )
        available = max(0, int(self._annual_allowance) - used)
        if requested > available:
            raise InsufficientLeaveDays(requested, available)

    @staticmethod
    def _parse_row(row: Mapping[str, str]) -> NewLeaveRequest:
        messages: List[str] = []

        employee_id = cell_int(row, "employeeid")
        if employee_id is None:
            messages.append(f"Invalid EmployeeId '{cell_text(row, 'employeeid')}'")

        leave_type = cell_text(row, "leavetype")
        if not leave_type:
            messages.append("LeaveType is required")

        start = as_date(cell_text(row, "startdate"))
        if start is None:
            messages.append(f"Invalid StartDate '{cell_text(row, 'startdate')}'")

        end = as_date(cell_text(row, "enddate"))
        if end is None:
            messages.append(f"Invalid EndDate '{cell_text(row, 'enddate')}'")

        if messages:
            raise RowRejected(messages)

        return NewLeaveRequest(
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            reason=cell_text(row, "reason"),
        )
