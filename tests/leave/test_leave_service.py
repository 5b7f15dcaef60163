from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from src.hr_management.hr_management.core.constants import DEFAULT_REJECT_COMMENT
from src.hr_management.hr_management.core.enums import LeaveStatus, LeaveType
from src.hr_management.hr_management.core.exceptions import (
    ConflictingLeaveRequest,
    EmployeeNotFound,
    InsufficientLeaveDays,
    InvalidLeaveRequestData,
    InvalidLeaveStatusTransition,
)
from src.hr_management.hr_management.leave.model import LeavePatch, NewLeaveRequest


@pytest.fixture
def service(container):
    return container.leave_service


def _request(employee, start=date(2025, 3, 10), end=date(2025, 3, 12), leave_type=LeaveType.ANNUAL):
    return NewLeaveRequest(
        employee_id=employee.employee_id,
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        reason="Family trip",
    )


def test_create_counts_days_and_starts_pending(service, employee):
    created = service.create(_request(employee))

    assert created.leave_request_id == 1
    assert created.days_requested == 3
    assert created.status is LeaveStatus.PENDING


def test_leave_type_accepts_integer_code(service, employee):
    created = service.create(_request(employee, leave_type="1"))

    assert created.leave_type is LeaveType.SICK


def test_start_date_in_the_past_is_rejected(service, employee):
    with pytest.raises(InvalidLeaveRequestData):
        service.create(_request(employee, start=date(2025, 2, 27), end=date(2025, 3, 2)))


def test_end_before_start_is_rejected(service, employee):
    with pytest.raises(InvalidLeaveRequestData):
        service.create(_request(employee, start=date(2025, 3, 12), end=date(2025, 3, 10)))


def test_start_today_is_allowed(service, employee):
    created = service.create(_request(employee, start=date(2025, 3, 1), end=date(2025, 3, 1)))

    assert created.days_requested == 1


def test_unknown_employee(service):
    with pytest.raises(EmployeeNotFound):
        service.create(
            NewLeaveRequest(employee_id=404, leave_type=0, start_date=date(2025, 3, 10), end_date=date(2025, 3, 11))
        )


def test_approve_then_reject_leaves_record_unchanged(service, employee, leave_repo):
    created = service.create(_request(employee))
    approved = service.approve(created.leave_request_id, "manager@example.com", "Enjoy")

    assert approved.status is LeaveStatus.APPROVED
    assert approved.reviewed_by == "manager@example.com"
    assert approved.manager_comments == "Enjoy"

    with pytest.raises(InvalidLeaveStatusTransition):
        service.reject(created.leave_request_id, "other@example.com")

    stored = leave_repo.get_by_id(created.leave_request_id)
    assert stored.status is LeaveStatus.APPROVED
    assert stored.reviewed_by == "manager@example.com"
    assert stored.manager_comments == "Enjoy"


def test_reject_uses_default_comment(service, employee):
    created = service.create(_request(employee))

    rejected = service.reject(created.leave_request_id, "manager@example.com")

    assert rejected.status is LeaveStatus.REJECTED
    assert rejected.manager_comments == DEFAULT_REJECT_COMMENT


def test_lost_review_race_reports_current_state(service, employee, leave_repo):
    created = service.create(_request(employee))
    original_update = leave_repo.update

    def concurrent_reject(request, *, expected_status=None):
        stored = leave_repo.items[request.leave_request_id]
        leave_repo.items[request.leave_request_id] = replace(stored, status=LeaveStatus.REJECTED)
        return original_update(request, expected_status=expected_status)

    leave_repo.update = concurrent_reject

    with pytest.raises(InvalidLeaveStatusTransition) as exc:
        service.approve(created.leave_request_id, "manager@example.com")

    assert exc.value.current is LeaveStatus.REJECTED
    assert leave_repo.items[created.leave_request_id].status is LeaveStatus.REJECTED


def test_generic_update_writes_status_without_guard(service, employee):
    created = service.create(_request(employee))
    service.reject(created.leave_request_id, "manager@example.com")

    updated = service.update(created.leave_request_id, LeavePatch(status="Approved", manager_comments="Reconsidered"))

    assert updated.status is LeaveStatus.APPROVED
    assert updated.manager_comments == "Reconsidered"


def test_overlap_with_pending_request_is_conflict(service, employee):
    service.create(_request(employee))

    with pytest.raises(ConflictingLeaveRequest):
        service.create(_request(employee, start=date(2025, 3, 12), end=date(2025, 3, 14)))


def test_rejected_request_does_not_block_calendar(service, employee):
    created = service.create(_request(employee))
    service.reject(created.leave_request_id, "manager@example.com")

    again = service.create(_request(employee))

    assert again.status is LeaveStatus.PENDING


def test_annual_allowance_is_enforced(service, employee):
    service.create(_request(employee, start=date(2025, 4, 1), end=date(2025, 4, 20)))

    with pytest.raises(InsufficientLeaveDays) as exc:
        service.create(_request(employee, start=date(2025, 5, 1), end=date(2025, 5, 10)))

    assert exc.value.available == 5
    assert exc.value.requested == 10


def test_allowance_ignores_other_leave_types(service, employee):
    service.create(_request(employee, start=date(2025, 4, 1), end=date(2025, 4, 20)))

    sick = service.create(_request(employee, start=date(2025, 5, 1), end=date(2025, 5, 10), leave_type=LeaveType.SICK))

    assert sick.days_requested == 10


def test_pending_listing(service, employee):
    first = service.create(_request(employee))
    service.create(_request(employee, start=date(2025, 3, 20), end=date(2025, 3, 21)))
    service.approve(first.leave_request_id, "manager@example.com")

    assert [r.start_date for r in service.list_pending()] == [date(2025, 3, 20)]
    assert len(service.list_by_status("Approved")) == 1
