"""Wage calculator: hours and rates to gross pay, FNPF, and net pay.

Rules:
- Normal hours are capped by a threshold (weekly per employee, 8 per day at
  timesheet entry); the excess is overtime.
- Overtime pays 1.5x the hourly wage.
- FNPF is 8% of normal pay, only for eligible employees with normal pay > 0.
- Net pay floors at zero. Deductions are not carried to a later period.

Arithmetic is Decimal throughout. Pay components are rounded to cents before
they are summed, so gross = normal + overtime + meal holds exactly on the
stored values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from branch_payroll.calculators.types import (
    ZERO,
    WageBreakdown,
    WageInput,
    round_to_cents,
    to_decimal,
)
from branch_payroll.errors import ValidationError

OVERTIME_MULTIPLIER = Decimal("1.5")
FNPF_RATE = Decimal("0.08")
DAILY_NORMAL_HOURS = 8
STANDARD_WEEKLY_THRESHOLD = 45
SPECIAL_WEEKLY_THRESHOLD = 48

EDITABLE_FIELDS = ("total_hours", "meal_allowance", "other_deductions")


def split_hours(total: Decimal, threshold: int | Decimal) -> tuple[Decimal, Decimal]:
    """Split hours into (normal, overtime) at ``threshold``."""
    threshold = Decimal(threshold)
    normal = min(total, threshold)
    overtime = max(ZERO, total - threshold)
    return normal, overtime


def fnpf_deduction_for(normal_pay: Decimal, fnpf_eligible: bool) -> Decimal:
    if fnpf_eligible and normal_pay > 0:
        return round_to_cents(normal_pay * FNPF_RATE)
    return ZERO.quantize(Decimal("0.01"))


def calculate_wage(wage_input: WageInput) -> WageBreakdown:
    """Compute one employee's pay for a period."""
    errors = []
    for name in ("hourly_wage", "hours_worked", "overtime_hours", "meal_allowance", "other_deductions"):
        if getattr(wage_input, name) < 0:
            errors.append(f"{name.replace('_', ' ').capitalize()} must not be negative")
    if wage_input.weekly_threshold <= 0:
        errors.append("Weekly threshold must be positive")
    if errors:
        raise ValidationError(errors)

    rate = wage_input.hourly_wage
    normal_hours, excess = split_hours(wage_input.hours_worked, wage_input.weekly_threshold)
    overtime_hours = wage_input.overtime_hours + excess

    normal_pay = round_to_cents(rate * normal_hours)
    overtime_pay = round_to_cents(overtime_hours * rate * OVERTIME_MULTIPLIER)
    meal_allowance = round_to_cents(wage_input.meal_allowance)
    other_deductions = round_to_cents(wage_input.other_deductions)

    gross_pay = normal_pay + overtime_pay + meal_allowance
    fnpf_deduction = fnpf_deduction_for(normal_pay, wage_input.fnpf_eligible)
    net_pay = max(ZERO, gross_pay - fnpf_deduction - other_deductions)

    return WageBreakdown(
        total_hours=round_to_cents(wage_input.hours_worked + wage_input.overtime_hours),
        normal_hours=round_to_cents(normal_hours),
        overtime_hours=round_to_cents(overtime_hours),
        normal_pay=normal_pay,
        overtime_pay=overtime_pay,
        meal_allowance=meal_allowance,
        other_deductions=other_deductions,
        gross_pay=gross_pay,
        fnpf_deduction=fnpf_deduction,
        net_pay=round_to_cents(net_pay),
    )


@dataclass(frozen=True)
class EditableWage:
    """A stored wage record as seen by the edit screen.

    total_hours, meal_allowance and other_deductions are the editable inputs;
    the remaining amounts are derived from them.
    """

    hourly_wage: Decimal
    weekly_threshold: int
    fnpf_eligible: bool
    total_hours: Decimal
    meal_allowance: Decimal
    other_deductions: Decimal
    hours_worked: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    fnpf_deduction: Decimal = ZERO
    gross_pay: Decimal = ZERO
    net_pay: Decimal = ZERO

    @classmethod
    def from_inputs(
        cls,
        hourly_wage: Decimal,
        weekly_threshold: int,
        fnpf_eligible: bool,
        total_hours: Decimal,
        meal_allowance: Decimal = ZERO,
        other_deductions: Decimal = ZERO,
    ) -> EditableWage:
        return _derive(
            cls(
                hourly_wage=hourly_wage,
                weekly_threshold=weekly_threshold,
                fnpf_eligible=fnpf_eligible,
                total_hours=total_hours,
                meal_allowance=meal_allowance,
                other_deductions=other_deductions,
            )
        )


def _derive(record: EditableWage) -> EditableWage:
    # Edited totals are re-split against the threshold; daily overtime folds in.
    breakdown = calculate_wage(
        WageInput(
            hourly_wage=record.hourly_wage,
            hours_worked=record.total_hours,
            overtime_hours=ZERO,
            meal_allowance=record.meal_allowance,
            other_deductions=record.other_deductions,
            fnpf_eligible=record.fnpf_eligible,
            weekly_threshold=record.weekly_threshold,
        )
    )
    return replace(
        record,
        hours_worked=breakdown.normal_hours,
        overtime_hours=breakdown.overtime_hours,
        fnpf_deduction=breakdown.fnpf_deduction,
        gross_pay=breakdown.gross_pay,
        net_pay=breakdown.net_pay,
    )


def recompute(record: EditableWage, changed_field: str, new_value: Any) -> EditableWage:
    """Return ``record`` with one input changed and every derived field recomputed."""
    if changed_field not in EDITABLE_FIELDS:
        raise ValidationError(f"Field '{changed_field}' is not editable")
    try:
        value = to_decimal(new_value)
    except ValueError:
        raise ValidationError(f"{changed_field.replace('_', ' ').capitalize()} must be a number")
    if value < 0:
        raise ValidationError(f"{changed_field.replace('_', ' ').capitalize()} must not be negative")
    return _derive(replace(record, **{changed_field: value}))
