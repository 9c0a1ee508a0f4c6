"""Branch payroll services."""

from branch_payroll.services.state_machine import (
    ApprovalStateMachine,
    ApprovalStatus,
    InvalidTransitionError,
    ReviewType,
)
from branch_payroll.services.aggregator import AggregatedHours, TimesheetAggregator
from branch_payroll.services.approval_service import ApprovalService, BatchSummary, FinalWageLine
from branch_payroll.services.eligibility import (
    EligibilityService,
    PeriodOption,
    resolve_final_wage_options,
    resolve_review_options,
)
from branch_payroll.services.employee_service import EmployeeService
from branch_payroll.services.timesheet_service import TimesheetService

__all__ = [
    "ApprovalStateMachine",
    "ApprovalStatus",
    "InvalidTransitionError",
    "ReviewType",
    "AggregatedHours",
    "TimesheetAggregator",
    "ApprovalService",
    "BatchSummary",
    "FinalWageLine",
    "EligibilityService",
    "PeriodOption",
    "resolve_final_wage_options",
    "resolve_review_options",
    "EmployeeService",
    "TimesheetService",
]
