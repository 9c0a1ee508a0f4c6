"""ORM models."""

from branch_payroll.models.approval import MERGED_BRANCH_KEY, PayPeriodApproval
from branch_payroll.models.base import Base, TimestampMixin, UpdatedAtMixin
from branch_payroll.models.employee import BankCode, Branch, Employee, PaymentMethod
from branch_payroll.models.timesheet import DailyTimesheetRecord, DayType, LeaveType
from branch_payroll.models.wage import WageRecord

__all__ = [
    "Base",
    "TimestampMixin",
    "UpdatedAtMixin",
    "BankCode",
    "Branch",
    "Employee",
    "PaymentMethod",
    "DailyTimesheetRecord",
    "DayType",
    "LeaveType",
    "MERGED_BRANCH_KEY",
    "PayPeriodApproval",
    "WageRecord",
]
