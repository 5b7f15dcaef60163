from __future__ import annotations

import random
from dataclasses import replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from threading import Event
from typing import BinaryIO, Callable, List, Mapping, Optional, Sequence, Union

import structlog

from ..bulk.excel import read_sheet, write_sheet
from ..bulk.reconciliation import RowRejected, cell_decimal, cell_int, cell_text, reconcile
from ..common.datetime_utils import as_date, now_utc
from ..common.validators import require_email, require_non_empty
from ..core.constants import EMPLOYEE_CODE_ALPHABET, EMPLOYEE_CODE_MAX_RETRIES, SERVICE_ACCOUNT
from ..core.enums import Gender
from ..core.exceptions import DepartmentNotFound, EmployeeNotFound, InvalidEmployeeData
from ..departments.repository import DepartmentRepository
from .model import Employee, EmployeePatch, NewEmployee
from .repository import EmployeeRepository

logger = structlog.get_logger(__name__)

IMPORT_REQUIRED_COLUMNS = ("firstname", "lastname", "email", "departmentid", "hiredate", "salary", "gender")
EXPORT_COLUMNS = (
    "EmployeeId",
    "UniqueCode",
    "FirstName",
    "LastName",
    "Gender",
    "Email",
    "PhoneNumber",
    "Address",
    "Position",
    "Salary",
    "DepartmentId",
    "HireDate",
)


class EmployeeService:
    """Use case: HR onboarding and maintenance of employee records."""

    def __init__(
        self,
        employees: EmployeeRepository,
        departments: DepartmentRepository,
        *,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._employees = employees
        self._departments = departments
        self._rng = rng or random.SystemRandom()
        self._clock = clock

    # -------- queries --------
    def list_all(self) -> Sequence[Employee]:
        return self._employees.list_all()

    def get_by_id(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound(employee_id)
        return employee

    def get_by_email(self, email: str) -> Employee:
        employee = self._employees.get_by_email((email or "").strip().lower())
        if not employee:
            raise EmployeeNotFound(email=email)
        return employee

    def list_by_department(self, department_id: int) -> Sequence[Employee]:
        return self._employees.list_by_department(int(department_id))

    # -------- commands --------
    def create(self, data: NewEmployee, *, actor: str = SERVICE_ACCOUNT) -> Employee:
        first_name = require_non_empty(data.first_name, "First name", error=InvalidEmployeeData)
        last_name = require_non_empty(data.last_name, "Last name", error=InvalidEmployeeData)
        email = require_email(data.email, error=InvalidEmployeeData)
        gender = self._gender(data.gender)
        salary = self._salary(data.salary)
        if data.hire_date is None:
            raise InvalidEmployeeData("Hire date is required.")

        if not self._departments.get_by_id(int(data.department_id)):
            raise DepartmentNotFound(data.department_id)

        if self._employees.get_by_email(email):
            raise InvalidEmployeeData(f"The email address '{email}' is already used by another employee.")

        employee = Employee(
            employee_id=0,
            unique_code=self.generate_unique_code(first_name, last_name, int(data.department_id)),
            first_name=first_name,
            last_name=last_name,
            gender=gender,
            email=email,
            salary=salary,
            hire_date=data.hire_date,
            department_id=int(data.department_id),
            phone_number=data.phone_number or None,
            address=data.address or None,
            position=data.position or None,
            created_at=self._clock(),
        )
        employee_id = self._employees.add(employee)
        logger.info("employee_created", employee_id=employee_id, unique_code=employee.unique_code, actor=actor)
        return replace(employee, employee_id=employee_id)

    def update(self, employee_id: int, patch: EmployeePatch, *, actor: str = SERVICE_ACCOUNT) -> Employee:
        employee = self.get_by_id(employee_id)

        if patch.department_id is not None and int(patch.department_id) != employee.department_id:
            if not self._departments.get_by_id(int(patch.department_id)):
                raise DepartmentNotFound(patch.department_id)

        changes = {}
        if patch.first_name is not None:
            changes["first_name"] = require_non_empty(patch.first_name, "First name", error=InvalidEmployeeData)
        if patch.last_name is not None:
            changes["last_name"] = require_non_empty(patch.last_name, "Last name", error=InvalidEmployeeData)
        if patch.email is not None:
            email = require_email(patch.email, error=InvalidEmployeeData)
            other = self._employees.get_by_email(email)
            if other and other.employee_id != employee.employee_id:
                raise InvalidEmployeeData(f"The email address '{email}' is already used by another employee.")
            changes["email"] = email
        if patch.gender is not None:
            changes["gender"] = self._gender(patch.gender)
        if patch.salary is not None:
            changes["salary"] = self._salary(patch.salary)
        for field in ("hire_date", "department_id", "phone_number", "address", "position"):
            value = getattr(patch, field)
            if value is not None:
                changes[field] = value

        employee = replace(employee, **changes)
        self._employees.update(employee)
        logger.info("employee_updated", employee_id=employee.employee_id, fields=sorted(changes), actor=actor)
        return employee

    def delete(self, employee_id: int, *, actor: str = SERVICE_ACCOUNT) -> None:
        self.get_by_id(employee_id)
        self._employees.delete(int(employee_id))
        logger.info("employee_deleted", employee_id=int(employee_id), actor=actor)

    def generate_unique_code(self, first_name: str, last_name: str, department_id: int) -> str:
        """``first[:2] + last[:2] + random char + department``, upper-cased.

        The random character is re-drawn while the code is taken, at most
        ``EMPLOYEE_CODE_MAX_RETRIES`` times.
        """

        prefix = first_name[:2] + last_name[:2]
        for _ in range(EMPLOYEE_CODE_MAX_RETRIES + 1):
            code = f"{prefix}{self._rng.choice(EMPLOYEE_CODE_ALPHABET)}{department_id}".upper()
            if not self._employees.get_by_unique_code(code):
                return code

        logger.warning("employee_code_exhausted", prefix=prefix.upper(), department_id=department_id)
        raise InvalidEmployeeData("Unable to generate a unique identifier for this employee.")

    # -------- import / export --------
    def import_file(
        self,
        source: Union[BinaryIO, bytes],
        *,
        actor: str = SERVICE_ACCOUNT,
        cancel: Optional[Event] = None,
    ) -> List[Employee]:
        sheet = read_sheet(source)
        if not sheet.rows:
            return []
        return reconcile(
            sheet,
            lambda row: self.create(self._parse_row(row), actor=actor),
            required_columns=IMPORT_REQUIRED_COLUMNS,
            entity="employees",
            cancel=cancel,
        )

    def export_excel(self) -> bytes:
        rows = [
            {
                "EmployeeId": e.employee_id,
                "UniqueCode": e.unique_code,
                "FirstName": e.first_name,
                "LastName": e.last_name,
                "Gender": int(e.gender),
                "Email": e.email,
                "PhoneNumber": e.phone_number or "",
                "Address": e.address or "",
                "Position": e.position or "",
                "Salary": float(e.salary),
                "DepartmentId": e.department_id,
                "HireDate": e.hire_date.isoformat(),
            }
            for e in self._employees.list_all()
        ]
        return write_sheet(rows, "Employees", columns=EXPORT_COLUMNS)

    # -------- helpers --------
    @staticmethod
    def _gender(value) -> Gender:
        try:
            return Gender(int(value))
        except (TypeError, ValueError):
            raise InvalidEmployeeData(f"Invalid gender: {value!r}")

    @staticmethod
    def _salary(value) -> Decimal:
        if value is None:
            raise InvalidEmployeeData("Salary is required.")
        try:
            salary = Decimal(str(value))
        except InvalidOperation:
            raise InvalidEmployeeData(f"Invalid salary: {value!r}")
        if not salary.is_finite():
            raise InvalidEmployeeData(f"Invalid salary: {value!r}")
        if salary < 0:
            raise InvalidEmployeeData("Salary cannot be negative.")
        return salary

    @staticmethod
    def _parse_row(row: Mapping[str, str]) -> NewEmployee:
        messages: List[str] = []

        if not cell_text(row, "firstname"):
            messages.append("First name is required.")
        if not cell_text(row, "lastname"):
            messages.append("Last name is required.")
        if not cell_text(row, "email"):
            messages.append("Email is required.")

        gender = cell_int(row, "gender")
        if gender is None:
            messages.append(f"Invalid gender: '{cell_text(row, 'gender')}'.")

        salary = cell_decimal(row, "salary")
        if salary is None:
            messages.append(f"Invalid salary: '{cell_text(row, 'salary')}'.")

        department_id = cell_int(row, "departmentid")
        if department_id is None:
            messages.append(f"Invalid department id: '{cell_text(row, 'departmentid')}'.")

        hire_date = as_date(cell_text(row, "hiredate"))
        if hire_date is None:
            messages.append(
                f"Invalid hire date: '{cell_text(row, 'hiredate')}'. Accepted formats: dd/mm/yyyy, yyyy-mm-dd."
            )

        if messages:
            raise RowRejected(messages)

        return NewEmployee(
            first_name=cell_text(row, "firstname"),
            last_name=cell_text(row, "lastname"),
            gender=gender,
            email=cell_text(row, "email"),
            salary=salary,
            hire_date=hire_date,
            department_id=department_id,
            phone_number=cell_text(row, "phonenumber") or None,
            address=cell_text(row, "address") or None,
            position=cell_text(row, "position") or None,
        )
