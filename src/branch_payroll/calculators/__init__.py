"""Pure payroll calculations: pay periods, daily hours, wages and leave balances."""

from branch_payroll.calculators.daily_hours import derive_daily_hours, parse_time
from branch_payroll.calculators.leave_balances import LEAVE_ALLOTMENTS, LeaveBalance, leave_balances
from branch_payroll.calculators.pay_periods import (
    PayPeriod,
    pay_period_for,
    period_start_for,
    periods_between,
)
from branch_payroll.calculators.types import (
    DailyHours,
    TimesheetEntryInput,
    WageBreakdown,
    WageInput,
    round_to_cents,
    to_decimal,
)
from branch_payroll.calculators.wage_calculator import (
    DAILY_NORMAL_HOURS,
    EDITABLE_FIELDS,
    FNPF_RATE,
    OVERTIME_MULTIPLIER,
    SPECIAL_WEEKLY_THRESHOLD,
    STANDARD_WEEKLY_THRESHOLD,
    EditableWage,
    calculate_wage,
    recompute,
    split_hours,
)

__all__ = [
    "DAILY_NORMAL_HOURS",
    "EDITABLE_FIELDS",
    "FNPF_RATE",
    "LEAVE_ALLOTMENTS",
    "OVERTIME_MULTIPLIER",
    "SPECIAL_WEEKLY_THRESHOLD",
    "STANDARD_WEEKLY_THRESHOLD",
    "DailyHours",
    "EditableWage",
    "LeaveBalance",
    "PayPeriod",
    "TimesheetEntryInput",
    "WageBreakdown",
    "WageInput",
    "calculate_wage",
    "derive_daily_hours",
    "leave_balances",
    "parse_time",
    "pay_period_for",
    "period_start_for",
    "periods_between",
    "recompute",
    "round_to_cents",
    "split_hours",
    "to_decimal",
]
