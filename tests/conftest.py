from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

import pytest

from src.hr_management.hr_management.attendance.model import AttendanceRecord
from src.hr_management.hr_management.container import wire
from src.hr_management.hr_management.core.enums import Gender, LeaveStatus
from src.hr_management.hr_management.core.exceptions import (
    DuplicateAttendance,
    DuplicateDepartmentName,
    DuplicateEmployee,
    UserRegistrationFailed,
)
from src.hr_management.hr_management.departments.model import Department
from src.hr_management.hr_management.employees.model import Employee
from src.hr_management.hr_management.leave.model import LeaveRequest
from src.hr_management.hr_management.tokens.model import RefreshToken
from src.hr_management.hr_management.users.model import User

TEST_SETTINGS = {
    "JWT_SECRET": "test-jwt-secret-0123456789abcdef0123456789",
    "JWT_ISSUER": "hr-management-test",
    "JWT_AUDIENCE": "hr-management-test-clients",
    "ACCESS_TOKEN_MINUTES": 60,
    "REFRESH_TOKEN_DAYS": 7,
    "ANNUAL_LEAVE_DAYS": 25,
}


class InMemoryDepartments:
    def __init__(self):
        self.items: Dict[int, Department] = {}
        self._id = 0

    def get_by_id(self, department_id: int) -> Optional[Department]:
        return self.items.get(department_id)

    def get_by_name(self, name: str) -> Optional[Department]:
        return next((d for d in self.items.values() if d.name.lower() == name.lower()), None)

    def get_by_code(self, code: str) -> Optional[Department]:
        return next((d for d in self.items.values() if d.code == code), None)

    def list_all(self) -> Sequence[Department]:
        return list(self.items.values())

    def add(self, department: Department) -> int:
        if self.get_by_name(department.name):
            raise DuplicateDepartmentName(department.name)
        self._id += 1
        self.items[self._id] = replace(department, department_id=self._id)
        return self._id

    def update(self, department: Department) -> bool:
        if department.department_id not in self.items:
            return False
        self.items[department.department_id] = department
        return True

    def delete(self, department_id: int) -> bool:
        return self.items.pop(department_id, None) is not None


class InMemoryEmployees:
    def __init__(self):
        self.items: Dict[int, Employee] = {}
        self._id = 0

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.items.get(employee_id)

    def get_by_email(self, email: str) -> Optional[Employee]:
        return next((e for e in self.items.values() if e.email == email), None)

    def get_by_unique_code(self, unique_code: str) -> Optional[Employee]:
        return next((e for e in self.items.values() if e.unique_code == unique_code), None)

    def list_all(self) -> Sequence[Employee]:
        return list(self.items.values())

    def list_by_department(self, department_id: int) -> Sequence[Employee]:
        return [e for e in self.items.values() if e.department_id == department_id]

    def add(self, employee: Employee) -> int:
        if self.get_by_email(employee.email) or self.get_by_unique_code(employee.unique_code):
            raise DuplicateEmployee("Employee already exists.")
        self._id += 1
        self.items[self._id] = replace(employee, employee_id=self._id)
        return self._id

    def update(self, employee: Employee) -> bool:
        if employee.employee_id not in self.items:
            return False
        self.items[employee.employee_id] = employee
        return True

    def delete(self, employee_id: int) -> bool:
        return self.items.pop(employee_id, None) is not None


class InMemoryAttendance:
    def __init__(self):
        self.items: Dict[int, AttendanceRecord] = {}
        self._id = 0

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.items.get(attendance_id)

    def list_all(self) -> Sequence[AttendanceRecord]:
        return list(self.items.values())

    def list_for_employee(self, employee_id: int) -> Sequence[AttendanceRecord]:
        return [r for r in self.items.values() if r.employee_id == employee_id]

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return next(
            (r for r in self.items.values() if r.employee_id == employee_id and r.work_date == work_date),
            None,
        )

    def list_by_date_range(self, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        return [r for r in self.items.values() if start_date <= r.work_date <= end_date]

    def add(self, record: AttendanceRecord) -> int:
        if self.get_for_employee_and_date(record.employee_id, record.work_date):
            raise DuplicateAttendance(record.employee_id, record.work_date)
        self._id += 1
        self.items[self._id] = replace(record, attendance_id=self._id)
        return self._id

    def update(self, record: AttendanceRecord) -> bool:
        if record.attendance_id not in self.items:
            return False
        self.items[record.attendance_id] = record
        return True

    def delete(self, attendance_id: int) -> bool:
        return self.items.pop(attendance_id, None) is not None


class InMemoryLeaveRequests:
    def __init__(self):
        self.items: Dict[int, LeaveRequest] = {}
        self._id = 0

    def get_by_id(self, leave_request_id: int) -> Optional[LeaveRequest]:
        return self.items.get(leave_request_id)

    def list_all(self) -> Sequence[LeaveRequest]:
        return list(self.items.values())

    def list_for_employee(self, employee_id: int) -> Sequence[LeaveRequest]:
        return [r for r in self.items.values() if r.employee_id == employee_id]

    def list_by_status(self, status: LeaveStatus) -> Sequence[LeaveRequest]:
        return [r for r in self.items.values() if r.status == status]

    def list_pending(self) -> Sequence[LeaveRequest]:
        return self.list_by_status(LeaveStatus.PENDING)

    def list_overlapping(self, *, employee_id: int, start_date: date, end_date: date, statuses) -> Sequence[LeaveRequest]:
        return [
            r
            for r in self.items.values()
            if r.employee_id == employee_id and r.status in statuses and r.overlaps(start_date, end_date)
        ]

    def add(self, request: LeaveRequest) -> int:
        self._id += 1
        self.items[self._id] = replace(request, leave_request_id=self._id)
        return self._id

    def update(self, request: LeaveRequest, *, expected_status: Optional[LeaveStatus] = None) -> bool:
        current = self.items.get(request.leave_request_id)
        if current is None:
            return False
        if expected_status is not None and current.status != expected_status:
            return False
        self.items[request.leave_request_id] = request
        return True

    def delete(self, leave_request_id: int) -> bool:
        return self.items.pop(leave_request_id, None) is not None


class InMemoryUsers:
    def __init__(self):
        self.items: Dict[str, User] = {}

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.items.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.items.values() if u.email == email), None)

    def add(self, user: User) -> None:
        if self.get_by_email(user.email):
            raise UserRegistrationFailed("A user with this email already exists.")
        self.items[user.user_id] = user

    def update(self, user: User) -> bool:
        if user.user_id not in self.items:
            return False
        self.items[user.user_id] = user
        return True


class InMemoryRefreshTokens:
    def __init__(self):
        self.items: Dict[str, RefreshToken] = {}

    def get_by_token(self, token: str) -> Optional[RefreshToken]:
        return self.items.get(token)

    def list_active_for_user(self, user_id: str, *, now: datetime) -> Sequence[RefreshToken]:
        return [t for t in self.items.values() if t.user_id == user_id and t.is_active(now)]

    def add(self, token: RefreshToken) -> None:
        self.items[token.token] = token

    def revoke(self, token: str, *, revoked_at: datetime, reason: str) -> bool:
        current = self.items.get(token)
        if current is None or current.revoked_at is not None:
            return False
        self.items[token] = replace(current, revoked_at=revoked_at, reason_revoked=reason)
        return True

    def set_replaced_by(self, token: str, replaced_by: str) -> bool:
        current = self.items.get(token)
        if current is None:
            return False
        self.items[token] = replace(current, replaced_by_token=replaced_by)
        return True

    def delete_expired(self, *, now: datetime) -> int:
        expired: List[str] = [key for key, t in self.items.items() if t.is_expired(now)]
        for key in expired:
            del self.items[key]
        return len(expired)


class FakeClock:
    """Settable clock shared by services under test."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def settings() -> dict:
    return dict(TEST_SETTINGS)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 1, 9, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def departments_repo() -> InMemoryDepartments:
    return InMemoryDepartments()


@pytest.fixture
def employees_repo() -> InMemoryEmployees:
    return InMemoryEmployees()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def leave_repo() -> InMemoryLeaveRequests:
    return InMemoryLeaveRequests()


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def tokens_repo() -> InMemoryRefreshTokens:
    return InMemoryRefreshTokens()


@pytest.fixture
def department(departments_repo, fixed_now) -> Department:
    department_id = departments_repo.add(
        Department(department_id=0, name="Engineering", code="ENG", description="", created_at=fixed_now)
    )
    return departments_repo.get_by_id(department_id)


@pytest.fixture
def employee(employees_repo, department, fixed_now) -> Employee:
    employee_id = employees_repo.add(
        Employee(
            employee_id=0,
            unique_code="JODOA1",
            first_name="John",
            last_name="Doe",
            gender=Gender.MALE,
            email="john.doe@example.com",
            salary=Decimal("1500.00"),
            hire_date=date(2024, 1, 15),
            department_id=department.department_id,
            created_at=fixed_now,
        )
    )
    return employees_repo.get_by_id(employee_id)


@pytest.fixture
def container(
    settings, clock, users_repo, tokens_repo, departments_repo, employees_repo, attendance_repo, leave_repo
):
    return wire(
        conn=None,
        users_repo=users_repo,
        tokens_repo=tokens_repo,
        departments_repo=departments_repo,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        settings=settings,
        clock=clock,
    )
