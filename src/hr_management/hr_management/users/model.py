from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an identity that can authenticate.

    Note: Plain data object (no DB access code).
    """

    user_id: str
    username: str
    email: str
    password_hash: str
    first_name: str = ""
    last_name: str = ""
    employee_id: Optional[int] = None
    roles: Tuple[Role, ...] = (Role.USER,)
    is_active: bool = True
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None


@dataclass(frozen=True)
class Registration:
    username: str
    email: str
    password: str
    confirm_password: str
    first_name: str = ""
    last_name: str = ""
    employee_id: Optional[int] = None
