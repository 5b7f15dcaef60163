from __future__ import annotations

from datetime import time, timedelta
from decimal import Decimal

import pytest

from src.hr_management.hr_management.attendance.calculator.standard_calculator import StandardWorkdayCalculator


@pytest.fixture
def calc():
    return StandardWorkdayCalculator()


def test_standard_day_has_no_overtime(calc):
    result = calc.compute(time(9, 0), time(18, 0), timedelta(hours=1))

    assert result.worked_hours == Decimal("8.00")
    assert result.overtime_hours == Decimal("0.00")


def test_long_day_produces_overtime(calc):
    result = calc.compute(time(8, 0), time(19, 0), timedelta(hours=1))

    assert result.worked_hours == Decimal("10.00")
    assert result.overtime_hours == Decimal("2.00")


def test_half_hour_break_on_long_day(calc):
    result = calc.compute(time(9, 0), time(19, 30), timedelta(minutes=30))

    assert result.worked_hours == Decimal("10.00")
    assert result.overtime_hours == Decimal("2.00")


def test_break_longer_than_span_clamps_to_zero(calc):
    result = calc.compute(time(9, 0), time(10, 0), timedelta(hours=2))

    assert result.worked_hours == Decimal("0.00")
    assert result.overtime_hours == Decimal("0.00")


def test_missing_clock_out_yields_nothing(calc):
    assert calc.compute(time(9, 0), None, None) is None


def test_partial_hours_round_to_cents(calc):
    result = calc.compute(time(9, 0), time(9, 20), None)

    assert result.worked_hours == Decimal("0.33")
