"""Type definitions for the calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from uuid import UUID

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Convert user or stored input to Decimal without float drift.

    None and blank strings become ``default``. Raises ValueError on garbage.
    """
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        result = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Not a number: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def round_to_cents(amount: Decimal) -> Decimal:
    """Round an amount (money or hours) to 2 decimal places."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class WageInput:
    """Per-employee inputs to the period wage calculation."""

    hourly_wage: Decimal
    hours_worked: Decimal  # normal-hours total from the aggregator
    overtime_hours: Decimal = ZERO  # daily-level overtime from the aggregator
    meal_allowance: Decimal = ZERO
    other_deductions: Decimal = ZERO
    fnpf_eligible: bool = False
    weekly_threshold: int = 45


@dataclass(frozen=True)
class WageBreakdown:
    """Result of the period wage calculation. Money and hours at 2dp."""

    total_hours: Decimal
    normal_hours: Decimal
    overtime_hours: Decimal
    normal_pay: Decimal
    overtime_pay: Decimal
    meal_allowance: Decimal
    other_deductions: Decimal
    gross_pay: Decimal
    fnpf_deduction: Decimal
    net_pay: Decimal


@dataclass(frozen=True)
class TimesheetEntryInput:
    """Raw daily entry as typed by the user.

    day_type is None while the entry is still unset. Times are "HH:MM".
    """

    employee_id: UUID
    entry_date: date
    branch: str
    day_type: str | None
    time_in: str | None = None
    lunch_in: str | None = None
    lunch_out: str | None = None
    time_out: str | None = None
    meal_allowance: str | Decimal | None = None
    overtime_reason: str | None = None
    leave_type: str | None = None
    leave_hours: str | Decimal | None = None


@dataclass(frozen=True)
class DailyHours:
    """Validated, normalized daily entry with derived hours."""

    day_type: str
    normal_hours: Decimal
    overtime_hours: Decimal
    meal_allowance: Decimal
    complete: bool
    time_in: str | None = None
    lunch_in: str | None = None
    lunch_out: str | None = None
    time_out: str | None = None
    overtime_reason: str | None = None
    leave_type: str | None = None
    gross_work_minutes: int = 0
    lunch_minutes: int = 0

    @property
    def net_work_hours(self) -> Decimal:
        return self.normal_hours + self.overtime_hours
