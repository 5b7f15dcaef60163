from __future__ import annotations

from enum import Enum, IntEnum


class Role(str, Enum):
    """User roles stored in the identity tables."""

    ADMIN = "Admin"
    MANAGER = "Manager"
    USER = "User"


class Gender(IntEnum):
    MALE = 0
    FEMALE = 1
    OTHER = 2


class LeaveType(IntEnum):
    """Closed set of leave types; integer codes are used by import files."""

    ANNUAL = 0
    SICK = 1
    UNPAID = 2
    MATERNITY = 3
    PATERNITY = 4
    OTHER = 5


class LeaveStatus(str, Enum):
    """Approval workflow status of a leave request."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_INPUT = "invalid_input"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    UNEXPECTED = "unexpected"


HTTP_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNEXPECTED: 500,
}
