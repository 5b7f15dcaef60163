from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..core.enums import Gender
from ..core.exceptions import DuplicateEmployee
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, translate_duplicate
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, unique_code, first_name, last_name, gender, email, phone_number,
    address, position, salary, hire_date, department_id, created_at
"""


def _to_employee(r: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        unique_code=r["unique_code"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        gender=Gender(int(r["gender"])),
        email=r["email"],
        salary=Decimal(r["salary"]),
        hire_date=r["hire_date"],
        department_id=int(r["department_id"]),
        phone_number=r.get("phone_number"),
        address=r.get("address"),
        position=r.get("position"),
        created_at=r.get("created_at"),
    )


def _duplicate(employee: Employee) -> DuplicateEmployee:
    return DuplicateEmployee(f"An employee with email '{employee.email}' or code '{employee.unique_code}' already exists.")


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value: Any) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE {where}=%s", (value,))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._get_one("employee_id", int(employee_id))

    def get_by_email(self, email: str) -> Optional[Employee]:
        return self._get_one("email", email)

    def get_by_unique_code(self, unique_code: str) -> Optional[Employee]:
        return self._get_one("unique_code", unique_code)

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY last_name ASC, first_name ASC")
            return [_to_employee(r) for r in fetchall(cur)]

    def list_by_department(self, department_id: int) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE department_id=%s ORDER BY last_name ASC, first_name ASC",
                (int(department_id),),
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def add(self, employee: Employee) -> int:
        with translate_duplicate(lambda: _duplicate(employee)):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO employees(
                        unique_code, first_name, last_name, gender, email, phone_number,
                        address, position, salary, hire_date, department_id, created_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        employee.unique_code,
                        employee.first_name,
                        employee.last_name,
                        int(employee.gender),
                        employee.email,
                        employee.phone_number,
                        employee.address,
                        employee.position,
                        employee.salary,
                        employee.hire_date,
                        int(employee.department_id),
                        employee.created_at,
                    ),
                )
                return int(cur.lastrowid)

    def update(self, employee: Employee) -> bool:
        with translate_duplicate(lambda: _duplicate(employee)):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE employees
                    SET first_name=%s, last_name=%s, gender=%s, email=%s, phone_number=%s,
                        address=%s, position=%s, salary=%s, hire_date=%s, department_id=%s
                    WHERE employee_id=%s
                    """,
                    (
                        employee.first_name,
                        employee.last_name,
                        int(employee.gender),
                        employee.email,
                        employee.phone_number,
                        employee.address,
                        employee.position,
                        employee.salary,
                        employee.hire_date,
                        int(employee.department_id),
                        int(employee.employee_id),
                    ),
                )
                return cur.rowcount > 0

    def delete(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employees WHERE employee_id=%s", (int(employee_id),))
            return cur.rowcount > 0
