"""Daily timesheet entry validation and hours derivation.

A worked day needs a time in. Once time out is supplied the entry is
complete: both lunch times become mandatory and hours are derived as

    net minutes = (time out - time in) - (lunch out - lunch in)
    normal hours = min(net hours, 8), overtime hours = the excess

An incomplete worked day is stored with zero hours so it can be finished
later. Absent days clear every time, allowance and reason field. Leave days
carry their recorded normal hours with no overtime and no meal allowance.
"""

from __future__ import annotations

import re
from datetime import time
from decimal import Decimal

from branch_payroll.calculators.types import (
    ZERO,
    DailyHours,
    TimesheetEntryInput,
    round_to_cents,
    to_decimal,
)
from branch_payroll.calculators.wage_calculator import DAILY_NORMAL_HOURS, split_hours
from branch_payroll.errors import ValidationError

DAY_TYPES = ("worked", "absent", "leave")
LEAVE_TYPES = ("annual", "sick", "bereavement", "maternity_paternity", "unpaid", "other")
DEFAULT_LEAVE_HOURS = Decimal(DAILY_NORMAL_HOURS)
MAX_DAILY_HOURS = Decimal(24)

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time(value: str | None) -> time | None:
    """Parse a 24-hour "HH:MM" string. Returns None when it does not parse."""
    if value is None:
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _format(value: time | None) -> str | None:
    return value.strftime("%H:%M") if value is not None else None


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _parse_required(value: str | None, label: str, errors: list[str]) -> time | None:
    if _blank(value):
        errors.append(f"{label} is required")
        return None
    parsed = parse_time(value)
    if parsed is None:
        errors.append(f"{label} must be a valid time (HH:MM, 00:00-23:59)")
    return parsed


def _parse_meal_allowance(value, errors: list[str]) -> Decimal:
    try:
        amount = to_decimal(value)
    except ValueError:
        errors.append("Meal allowance must be a number")
        return ZERO
    if amount < 0:
        errors.append("Meal allowance must not be negative")
        return ZERO
    return round_to_cents(amount)


def _derive_worked(entry: TimesheetEntryInput) -> DailyHours:
    errors: list[str] = []

    # 1. time in
    time_in = _parse_required(entry.time_in, "Time in", errors)

    # 2. time out makes the entry complete, lunch becomes mandatory
    complete = not _blank(entry.time_out)
    if complete:
        time_out = _parse_required(entry.time_out, "Time out", errors)
        lunch_in = _parse_required(entry.lunch_in, "Lunch in", errors)
        lunch_out = _parse_required(entry.lunch_out, "Lunch out", errors)
    else:
        # Partial saves may carry lunch times already; keep them if they parse.
        time_out = None
        lunch_in = parse_time(entry.lunch_in)
        lunch_out = parse_time(entry.lunch_out)
        if not _blank(entry.lunch_in) and lunch_in is None:
            errors.append("Lunch in must be a valid time (HH:MM, 00:00-23:59)")
        if not _blank(entry.lunch_out) and lunch_out is None:
            errors.append("Lunch out must be a valid time (HH:MM, 00:00-23:59)")

    gross_minutes = lunch_minutes = 0
    if complete:
        # 3. time out after time in
        if time_in is not None and time_out is not None:
            gross_minutes = _minutes(time_out) - _minutes(time_in)
            if gross_minutes <= 0:
                errors.append("Time out must be after time in")
        # 4. lunch out after lunch in
        if lunch_in is not None and lunch_out is not None:
            lunch_minutes = _minutes(lunch_out) - _minutes(lunch_in)
            if lunch_minutes <= 0:
                errors.append("Lunch out must be after lunch in")
        # 5. lunch inside the work window
        if None not in (time_in, time_out, lunch_in, lunch_out):
            if lunch_in < time_in or lunch_out > time_out:
                errors.append("Lunch must fall between time in and time out")
            # 6. lunch no longer than the working day
            if lunch_minutes > gross_minutes:
                errors.append("Lunch duration cannot exceed total work duration")

    # 7. meal allowance
    meal_allowance = _parse_meal_allowance(entry.meal_allowance, errors)

    if errors:
        raise ValidationError(errors)

    normal_hours = overtime_hours = ZERO
    if complete:
        net_hours = Decimal(gross_minutes - lunch_minutes) / Decimal(60)
        normal, overtime = split_hours(net_hours, DAILY_NORMAL_HOURS)
        normal_hours, overtime_hours = round_to_cents(normal), round_to_cents(overtime)

    return DailyHours(
        day_type="worked",
        normal_hours=normal_hours,
        overtime_hours=overtime_hours,
        meal_allowance=meal_allowance,
        complete=complete,
        time_in=_format(time_in),
        lunch_in=_format(lunch_in),
        lunch_out=_format(lunch_out),
        time_out=_format(time_out),
        overtime_reason=None if _blank(entry.overtime_reason) else entry.overtime_reason.strip(),
        gross_work_minutes=gross_minutes,
        lunch_minutes=lunch_minutes,
    )


def _derive_leave(entry: TimesheetEntryInput) -> DailyHours:
    errors: list[str] = []
    leave_type = entry.leave_type
    if _blank(leave_type):
        errors.append("Leave type is required for a leave day")
    elif leave_type not in LEAVE_TYPES:
        errors.append(f"Leave type must be one of: {', '.join(LEAVE_TYPES)}")

    default_hours = ZERO if leave_type == "unpaid" else DEFAULT_LEAVE_HOURS
    try:
        hours = to_decimal(entry.leave_hours, default=default_hours)
    except ValueError:
        errors.append("Leave hours must be a number")
        hours = ZERO
    else:
        if hours < 0 or hours > MAX_DAILY_HOURS:
            errors.append("Leave hours must be between 0 and 24")

    if errors:
        raise ValidationError(errors)

    return DailyHours(
        day_type="leave",
        normal_hours=round_to_cents(hours),
        overtime_hours=round_to_cents(ZERO),
        meal_allowance=round_to_cents(ZERO),
        complete=True,
        overtime_reason=None if _blank(entry.overtime_reason) else entry.overtime_reason.strip(),
        leave_type=leave_type,
    )


def derive_daily_hours(entry: TimesheetEntryInput) -> DailyHours:
    """Validate a daily entry and derive its stored hours.

    Raises ValidationError listing every failed constraint.
    """
    if entry.day_type is None:
        raise ValidationError("Select whether the employee worked, was absent, or was on leave")
    if entry.day_type not in DAY_TYPES:
        raise ValidationError(f"Day type must be one of: {', '.join(DAY_TYPES)}")

    if entry.day_type == "absent":
        return DailyHours(
            day_type="absent",
            normal_hours=round_to_cents(ZERO),
            overtime_hours=round_to_cents(ZERO),
            meal_allowance=round_to_cents(ZERO),
            complete=True,
        )
    if entry.day_type == "leave":
        return _derive_leave(entry)
    return _derive_worked(entry)
