from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import time, timedelta
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class WorkedTime:
    worked_hours: Decimal
    overtime_hours: Decimal


class WorkedHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked/overtime hours)."""

    @abstractmethod
    def compute(
        self,
        clock_in: Optional[time],
        clock_out: Optional[time],
        break_duration: Optional[timedelta],
    ) -> Optional[WorkedTime]:
        """Return ``None`` when the record is incomplete (no clock-in or clock-out)."""

        raise NotImplementedError
