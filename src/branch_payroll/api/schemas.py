"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

BranchName = Literal["labasa", "suva"]


# ============================================================================
# Errors
# ============================================================================


class ErrorResponse(BaseModel):
    """Error body returned for every rejected operation."""

    detail: str
    code: str
    errors: list[str] = Field(default_factory=list)


# ============================================================================
# Employee schemas
# ============================================================================


class EmployeeWrite(BaseModel):
    """Schema for creating or updating an employee."""

    name: str
    position: str
    hourly_wage: Decimal
    fnpf_no: str | None = None
    tin_no: str | None = None
    bank_code: str | None = None
    bank_account_number: str | None = None
    payment_method: str
    branch: str
    fnpf_eligible: bool = False
    weekly_normal_hours_threshold: int | None = None
    is_active: bool | None = None


class EmployeeResponse(BaseModel):
    """Schema for employee response."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    name: str
    position: str
    hourly_wage: Decimal
    fnpf_no: str | None = None
    tin_no: str | None = None
    bank_code: str | None = None
    bank_account_number: str | None = None
    payment_method: str
    branch: str
    fnpf_eligible: bool
    is_active: bool
    weekly_normal_hours_threshold: int
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Timesheet schemas
# ============================================================================


class TimesheetEntryWrite(BaseModel):
    """Schema for a daily timesheet entry as typed by the user."""

    employee_id: UUID
    entry_date: date
    branch: str
    day_type: str | None = None
    time_in: str | None = None
    lunch_in: str | None = None
    lunch_out: str | None = None
    time_out: str | None = None
    meal_allowance: str | None = None
    overtime_reason: str | None = None
    leave_type: str | None = None
    leave_hours: str | None = None


class TimesheetEntryResponse(BaseModel):
    """Schema for a stored daily timesheet entry."""

    model_config = ConfigDict(from_attributes=True)

    entry_id: UUID
    employee_id: UUID
    branch: str
    entry_date: date
    day_type: str
    leave_type: str | None = None
    time_in: str | None = None
    lunch_in: str | None = None
    lunch_out: str | None = None
    time_out: str | None = None
    normal_hours: Decimal
    overtime_hours: Decimal
    meal_allowance: Decimal
    overtime_reason: str | None = None
    is_complete: bool


class UpsertResponse(BaseModel):
    """Identifier of the inserted or updated entry."""

    entry_id: UUID


class AggregatedHoursResponse(BaseModel):
    """Per-employee hour totals for a period."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    total_hours: Decimal
    total_normal_hours: Decimal
    total_overtime_hours: Decimal
    total_meal_allowance: Decimal
    days_recorded: int


class LeaveBalanceResponse(BaseModel):
    """Yearly leave balance for one leave type. Null allotment means unlimited."""

    model_config = ConfigDict(from_attributes=True)

    leave_type: str
    allotment: int | None
    used_days: int
    remaining: int | None


# ============================================================================
# Approval schemas
# ============================================================================


class PeriodOptionResponse(BaseModel):
    """A period that may be submitted."""

    model_config = ConfigDict(from_attributes=True)

    date_from: date
    date_to: date
    branch: str | None = None
    review_type: str
    label: str


class ReviewRequest(BaseModel):
    """Schema for requesting a timesheet review."""

    date_from: date
    date_to: date
    initiated_by: str
    branch: BranchName | None = None


class FinalWageRequest(BaseModel):
    """Schema for submitting a period's wages for final approval."""

    date_from: date
    date_to: date
    initiated_by: str
    branch: BranchName | None = None
    other_deductions: dict[UUID, Decimal] = Field(default_factory=dict)


class BatchResponse(BaseModel):
    """Schema for an approval batch."""

    model_config = ConfigDict(from_attributes=True)

    approval_id: UUID
    date_from: date
    date_to: date
    branch: str | None = None
    status: str
    review_type: str
    initiated_by: str
    token: str
    decided_by: str | None = None
    decided_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class BatchSummaryResponse(BatchResponse):
    """Schema for a batch with totals over its wage records."""

    total_wages: Decimal
    total_cash_wages: Decimal
    total_online_wages: Decimal
    record_count: int


class WageRecordResponse(BaseModel):
    """Schema for a computed wage record."""

    model_config = ConfigDict(from_attributes=True)

    wage_record_id: UUID
    approval_id: UUID
    employee_id: UUID
    employee_name: str
    hourly_wage: Decimal
    total_hours: Decimal
    hours_worked: Decimal
    overtime_hours: Decimal
    meal_allowance: Decimal
    other_deductions: Decimal
    gross_pay: Decimal
    fnpf_deduction: Decimal
    net_pay: Decimal
    date_from: date
    date_to: date
    approval_status: str


class WageRecordEdit(BaseModel):
    """Changes to one wage record. Omitted fields are left as they are."""

    wage_record_id: UUID
    total_hours: Decimal | None = None
    meal_allowance: Decimal | None = None
    other_deductions: Decimal | None = None


class WageRecordEditRequest(BaseModel):
    """Schema for editing records in a batch."""

    records: list[WageRecordEdit] = Field(min_length=1)


class DecisionRequest(BaseModel):
    """Schema for a reviewer's decision on a batch."""

    status: Literal["approved", "declined"]
    decided_by: str | None = None
