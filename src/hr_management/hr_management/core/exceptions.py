from __future__ import annotations

from datetime import date
from typing import Mapping, Sequence

from .enums import HTTP_STATUS_BY_KIND, ErrorKind


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries an ``ErrorKind`` and a stable ``code`` so the HTTP
    boundary can map it to a wire status without inspecting messages.
    """

    kind: ErrorKind = ErrorKind.INVALID_INPUT
    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


# -------- 400 --------
class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "INVALID_INPUT"


class InvalidAttendanceData(ValidationError):
    code = "INVALID_ATTENDANCE_DATA"


class InvalidLeaveRequestData(ValidationError):
    code = "INVALID_LEAVE_REQUEST_DATA"


class InvalidEmployeeData(ValidationError):
    code = "INVALID_EMPLOYEE_DATA"


class InvalidDepartmentData(ValidationError):
    code = "INVALID_DEPARTMENT_DATA"


class InvalidLeaveStatusTransition(ValidationError):
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current, target):
        super().__init__(f"Invalid status transition from '{current.value}' to '{target.value}'")
        self.current = current
        self.target = target


class InsufficientLeaveDays(ValidationError):
    code = "INSUFFICIENT_LEAVE_DAYS"

    def __init__(self, requested: int, available: int):
        super().__init__(f"Insufficient leave days. Requested: {requested}, available: {available}")
        self.requested = requested
        self.available = available


class InvalidDateRange(ValidationError):
    code = "INVALID_DATE_RANGE"

    def __init__(self, start_date: date, end_date: date):
        super().__init__(f"Invalid date range: {start_date:%Y-%m-%d} is after {end_date:%Y-%m-%d}.")


class NotClockedIn(ValidationError):
    code = "NOT_CLOCKED_IN"

    def __init__(self, employee_id: int, message: str | None = None):
        super().__init__(message or f"Employee {employee_id} has not clocked in.")


class OperationCancelled(DomainError):
    code = "OPERATION_CANCELLED"


class ValidationFailed(DomainError):
    """Aggregate validation error carrying a field/row -> messages map."""

    kind = ErrorKind.VALIDATION
    code = "VALIDATION_ERROR"

    def __init__(self, errors: Mapping[str, Sequence[str]], message: str = "One or more validation errors occurred."):
        super().__init__(message)
        self.errors = {key: list(msgs) for key, msgs in errors.items()}


class ImportFailed(ValidationFailed):
    code = "IMPORT_ERROR"

    def __init__(self, errors: Mapping[str, Sequence[str]]):
        super().__init__(errors, "Errors occurred during the import.")


# -------- 401 / 403 --------
class AuthenticationError(DomainError):
    """Raised when login credentials or tokens are invalid."""

    kind = ErrorKind.AUTHENTICATION
    code = "UNAUTHORIZED"


class InvalidCredentials(AuthenticationError):
    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid email or password."):
        super().__init__(message)


class InvalidRefreshToken(AuthenticationError):
    code = "INVALID_REFRESH_TOKEN"

    def __init__(self, message: str = "Refresh token is invalid or expired."):
        super().__init__(message)


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = ErrorKind.AUTHORIZATION
    code = "FORBIDDEN"


class UserRegistrationFailed(ValidationError):
    code = "USER_REGISTRATION_FAILED"


# -------- 404 --------
class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND
    code = "NOT_FOUND"


class EmployeeNotFound(NotFoundError):
    code = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: int | None = None, *, email: str | None = None):
        if email is not None:
            super().__init__(f"Employee with email {email} not found.")
        else:
            super().__init__(f"Employee with ID {employee_id} not found.")


class DepartmentNotFound(NotFoundError):
    code = "DEPARTMENT_NOT_FOUND"

    def __init__(self, department_id: int):
        super().__init__(f"Department with ID {department_id} not found.")


class AttendanceNotFound(NotFoundError):
    code = "ATTENDANCE_NOT_FOUND"

    def __init__(self, attendance_id: int):
        super().__init__(f"Attendance with ID {attendance_id} not found.")


class LeaveRequestNotFound(NotFoundError):
    code = "LEAVE_REQUEST_NOT_FOUND"

    def __init__(self, leave_request_id: int):
        super().__init__(f"Leave request with ID {leave_request_id} not found.")


class UserNotFound(NotFoundError):
    code = "USER_NOT_FOUND"

    def __init__(self, user_id: str | None = None):
        super().__init__(f"User with ID '{user_id}' not found." if user_id else "User not found.")


# -------- 409 --------
class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT
    code = "CONFLICT"


class DuplicateAttendance(ConflictError):
    code = "DUPLICATE_ATTENDANCE"

    def __init__(self, employee_id: int, work_date: date):
        super().__init__(f"An attendance already exists for employee {employee_id} on {work_date:%Y-%m-%d}.")


class AlreadyClockedIn(ConflictError):
    code = "ALREADY_CLOCKED_IN"

    def __init__(self, employee_id: int):
        super().__init__(f"Employee {employee_id} has already clocked in.")


class ConflictingLeaveRequest(ConflictError):
    code = "CONFLICTING_LEAVE_REQUEST"

    def __init__(self, start_date: date, end_date: date):
        super().__init__(f"Conflicting leave detected for the period {start_date:%d/%m/%Y} to {end_date:%d/%m/%Y}")


class DuplicateDepartmentName(ConflictError):
    code = "DEPARTMENT_NAME_EXISTS"

    def __init__(self, name: str):
        super().__init__(f"Department name '{name}' already exists.")


class DuplicateDepartmentCode(ConflictError):
    code = "DEPARTMENT_CODE_EXISTS"

    def __init__(self, code: str):
        super().__init__(f"Department code '{code}' already exists.")


class DuplicateEmployee(ConflictError):
    code = "DUPLICATE_EMPLOYEE"


# -------- 500 --------
class ConfigurationError(DomainError):
    kind = ErrorKind.UNEXPECTED
    code = "CONFIGURATION_ERROR"
