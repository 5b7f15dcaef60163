from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.exceptions import DuplicateDepartmentName
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, translate_duplicate
from .model import Department
from .repository import DepartmentRepository


def _to_department(r: Dict[str, Any]) -> Department:
    return Department(
        department_id=int(r["department_id"]),
        name=r["name"],
        code=r["code"],
        description=r.get("description") or "",
        created_at=r.get("created_at"),
    )


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value: Any) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT department_id, name, code, description, created_at FROM departments WHERE {where}=%s",
                (value,),
            )
            r = fetchone(cur)
            return _to_department(r) if r else None

    def get_by_id(self, department_id: int) -> Optional[Department]:
        return self._get_one("department_id", int(department_id))

    def get_by_name(self, name: str) -> Optional[Department]:
        return self._get_one("name", name)

    def get_by_code(self, code: str) -> Optional[Department]:
        return self._get_one("code", code)

    def list_all(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT department_id, name, code, description, created_at FROM departments ORDER BY name ASC")
            return [_to_department(r) for r in fetchall(cur)]

    def add(self, department: Department) -> int:
        # name and code are both UNIQUE; the service checks each before insert.
        with translate_duplicate(lambda: DuplicateDepartmentName(department.name)):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO departments(name, code, description, created_at) VALUES(%s,%s,%s,%s)",
                    (department.name, department.code, department.description, department.created_at),
                )
                return int(cur.lastrowid)

    def update(self, department: Department) -> bool:
        with translate_duplicate(lambda: DuplicateDepartmentName(department.name)):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE departments SET name=%s, description=%s WHERE department_id=%s",
                    (department.name, department.description, int(department.department_id)),
                )
                return cur.rowcount > 0

    def delete(self, department_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM departments WHERE department_id=%s", (int(department_id),))
            return cur.rowcount > 0
