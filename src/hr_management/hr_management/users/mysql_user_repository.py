from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.enums import Role
from ..core.exceptions import UserRegistrationFailed
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, translate_duplicate
from .model import User
from .repository import UserRepository

_COLUMNS = """
    user_id, username, email, password_hash, first_name, last_name, employee_id,
    is_active, created_at, last_login_at
"""


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value: Any) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {where}=%s", (value,))
            row = fetchone(cur)
            if not row:
                return None
            cur.execute("SELECT role FROM user_roles WHERE user_id=%s ORDER BY role", (row["user_id"],))
            roles = tuple(Role(r["role"]) for r in fetchall(cur))
            return self._to_user(row, roles)

    @staticmethod
    def _to_user(row: Dict[str, Any], roles) -> User:
        return User(
            user_id=str(row["user_id"]),
            username=row["username"],
            email=row["email"],
            password_hash=row["password_hash"],
            first_name=row.get("first_name") or "",
            last_name=row.get("last_name") or "",
            employee_id=row.get("employee_id"),
            roles=roles,
            is_active=bool(row.get("is_active", True)),
            created_at=row.get("created_at"),
            last_login_at=row.get("last_login_at"),
        )

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._get_one("user_id", str(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_one("email", email)

    def add(self, user: User) -> None:
        with translate_duplicate(lambda: UserRegistrationFailed("A user with this email already exists.")):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(
                        user_id, username, email, password_hash, first_name, last_name,
                        employee_id, is_active, created_at, last_login_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        user.user_id,
                        user.username,
                        user.email,
                        user.password_hash,
                        user.first_name,
                        user.last_name,
                        user.employee_id,
                        1 if user.is_active else 0,
                        user.created_at,
                        user.last_login_at,
                    ),
                )
                cur.executemany(
                    "INSERT INTO user_roles(user_id, role) VALUES(%s,%s)",
                    [(user.user_id, role.value) for role in user.roles],
                )

    def update(self, user: User) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET username=%s, first_name=%s, last_name=%s, employee_id=%s,
                    password_hash=%s, is_active=%s, last_login_at=%s
                WHERE user_id=%s
                """,
                (
                    user.username,
                    user.first_name,
                    user.last_name,
                    user.employee_id,
                    user.password_hash,
                    1 if user.is_active else 0,
                    user.last_login_at,
                    user.user_id,
                ),
            )
            return cur.rowcount > 0
