from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ...core.constants import STANDARD_WORKDAY_HOURS
from .base import WorkedHoursCalculator, WorkedTime

_CENT = Decimal("0.01")
_SECONDS_PER_HOUR = Decimal(3600)


class StandardWorkdayCalculator(WorkedHoursCalculator):
    """Standard rule: (out - in) - break, not below 0; overtime past the standard day."""

    def __init__(self, standard_hours: int = STANDARD_WORKDAY_HOURS):
        self._standard_hours = Decimal(standard_hours)

    def compute(
        self,
        clock_in: Optional[time],
        clock_out: Optional[time],
        break_duration: Optional[timedelta],
    ) -> Optional[WorkedTime]:
        if clock_in is None or clock_out is None:
            return None

        span = datetime.combine(date.min, clock_out) - datetime.combine(date.min, clock_in)
        span -= break_duration or timedelta(0)

        worked = max(Decimal(0), Decimal(int(span.total_seconds())) / _SECONDS_PER_HOUR)
        worked = worked.quantize(_CENT, rounding=ROUND_HALF_UP)
        overtime = max(Decimal(0), worked - self._standard_hours).quantize(_CENT)
        return WorkedTime(worked_hours=worked, overtime_hours=overtime)
