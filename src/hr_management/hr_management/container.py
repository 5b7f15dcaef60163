from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_ACCESS_TOKEN_MINUTES, DEFAULT_REFRESH_TOKEN_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .departments.mysql_department_repository import MySQLDepartmentRepository
from .departments.repository import DepartmentRepository
from .departments.service import DepartmentService
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .leave.mysql_leave_repository import MySQLLeaveRequestRepository
from .leave.repository import LeaveRequestRepository
from .leave.service import LeaveRequestService
from .tokens.jwt_issuer import JwtIssuer
from .tokens.mysql_token_repository import MySQLRefreshTokenRepository
from .tokens.repository import RefreshTokenRepository
from .tokens.service import TokenService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    tokens_repo: RefreshTokenRepository
    departments_repo: DepartmentRepository
    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    leave_repo: LeaveRequestRepository

    issuer: JwtIssuer
    token_service: TokenService
    auth_service: AuthService
    department_service: DepartmentService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    leave_service: LeaveRequestService


def wire(
    *,
    conn: Optional[DatabaseConnection],
    users_repo: UserRepository,
    tokens_repo: RefreshTokenRepository,
    departments_repo: DepartmentRepository,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    leave_repo: LeaveRequestRepository,
    settings: Mapping[str, Any],
    **service_options: Any,
) -> Container:
    """Assemble services over the given stores.

    ``service_options`` may carry ``clock`` (shared by every service) and
    ``rng`` (employee code generation).
    """

    clock_kw = {"clock": service_options["clock"]} if "clock" in service_options else {}

    issuer = JwtIssuer(
        secret=str(settings["JWT_SECRET"]),
        issuer=str(settings["JWT_ISSUER"]),
        audience=str(settings["JWT_AUDIENCE"]),
        access_token_minutes=int(settings.get("ACCESS_TOKEN_MINUTES", DEFAULT_ACCESS_TOKEN_MINUTES)),
        **clock_kw,
    )
    token_service = TokenService(
        tokens_repo,
        users_repo,
        issuer,
        refresh_token_days=int(settings.get("REFRESH_TOKEN_DAYS", DEFAULT_REFRESH_TOKEN_DAYS)),
        **clock_kw,
    )
    auth_service = AuthService(users_repo, token_service, **clock_kw)
    department_service = DepartmentService(departments_repo, **clock_kw)
    employee_service = EmployeeService(
        employees_repo, departments_repo, rng=service_options.get("rng"), **clock_kw
    )
    attendance_service = AttendanceService(attendance_repo, employees_repo, **clock_kw)
    annual = settings.get("ANNUAL_LEAVE_DAYS")
    leave_service = LeaveRequestService(
        leave_repo,
        employees_repo,
        annual_leave_allowance=int(annual) if annual is not None else None,
        **clock_kw,
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        tokens_repo=tokens_repo,
        departments_repo=departments_repo,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        issuer=issuer,
        token_service=token_service,
        auth_service=auth_service,
        department_service=department_service,
        employee_service=employee_service,
        attendance_service=attendance_service,
        leave_service=leave_service,
    )


def build_container(*, db_config: dict, settings: Mapping[str, Any]) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        tokens_repo=MySQLRefreshTokenRepository(conn),
        departments_repo=MySQLDepartmentRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leave_repo=MySQLLeaveRequestRepository(conn),
        settings=settings,
    )
