from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import Gender


@dataclass(frozen=True)
class Employee:
    employee_id: int
    unique_code: str
    first_name: str
    last_name: str
    gender: Gender
    email: str
    salary: Decimal
    hire_date: date
    department_id: int
    phone_number: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class NewEmployee:
    first_name: str
    last_name: str
    gender: Gender
    email: str
    salary: Decimal
    hire_date: date
    department_id: int
    phone_number: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None


@dataclass(frozen=True)
class EmployeePatch:
    """Fields left as ``None`` keep their stored value."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[Gender] = None
    email: Optional[str] = None
    salary: Optional[Decimal] = None
    hire_date: Optional[date] = None
    department_id: Optional[int] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
