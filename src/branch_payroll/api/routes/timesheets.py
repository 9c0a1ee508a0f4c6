"""Daily timesheet endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from branch_payroll.api.dependencies import AdminConfirmation, AppSettings, DbSession
from branch_payroll.api.schemas import (
    AggregatedHoursResponse,
    ErrorResponse,
    LeaveBalanceResponse,
    TimesheetEntryResponse,
    TimesheetEntryWrite,
    UpsertResponse,
)
from branch_payroll.calculators.types import TimesheetEntryInput
from branch_payroll.errors import NotFoundError
from branch_payroll.services.aggregator import TimesheetAggregator
from branch_payroll.services.timesheet_service import TimesheetService

router = APIRouter(prefix="/timesheets", tags=["timesheets"])


@router.get("", response_model=list[TimesheetEntryResponse])
async def list_entries(
    db: DbSession,
    settings: AppSettings,
    date_from: Annotated[date, Query()],
    date_to: Annotated[date, Query()],
    branch: Annotated[str | None, Query()] = None,
    employee_id: Annotated[UUID | None, Query()] = None,
) -> list[TimesheetEntryResponse]:
    entries = await TimesheetService(db, settings).list_entries(date_from, date_to, branch, employee_id)
    return [TimesheetEntryResponse.model_validate(e) for e in entries]


@router.put(
    "",
    response_model=UpsertResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def upsert_entry(
    db: DbSession,
    settings: AppSettings,
    payload: TimesheetEntryWrite,
) -> UpsertResponse:
    """Insert or update the entry for (employee, date)."""
    entry_id = await TimesheetService(db, settings).upsert_entry(
        TimesheetEntryInput(**payload.model_dump())
    )
    return UpsertResponse(entry_id=entry_id)


@router.get("/hours", response_model=list[AggregatedHoursResponse])
async def get_hours_for_period(
    db: DbSession,
    date_from: Annotated[date, Query()],
    date_to: Annotated[date, Query()],
    branch: Annotated[str | None, Query()] = None,
    employee_id: Annotated[UUID | None, Query()] = None,
) -> list[AggregatedHoursResponse]:
    """Per-employee hour totals for a date range."""
    summaries = await TimesheetAggregator(db).get_hours_for_period(date_from, date_to, branch, employee_id)
    return [AggregatedHoursResponse.model_validate(s) for s in summaries]


@router.get(
    "/leave-balances",
    response_model=list[LeaveBalanceResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_leave_balances(
    db: DbSession,
    settings: AppSettings,
    employee_id: Annotated[UUID, Query()],
    year: Annotated[int | None, Query(ge=1, le=9999)] = None,
) -> list[LeaveBalanceResponse]:
    """Remaining leave per type for a calendar year, the current one by default."""
    balances = await TimesheetService(db, settings).get_leave_balances(
        employee_id, year or date.today().year
    )
    return [LeaveBalanceResponse.model_validate(b) for b in balances]


@router.get(
    "/{employee_id}/{entry_date}",
    response_model=TimesheetEntryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_entry(
    db: DbSession,
    settings: AppSettings,
    employee_id: Annotated[UUID, Path()],
    entry_date: Annotated[date, Path()],
) -> TimesheetEntryResponse:
    entry = await TimesheetService(db, settings).get_entry(employee_id, entry_date)
    if entry is None:
        raise NotFoundError("Timesheet entry", f"for employee {employee_id} on {entry_date}")
    return TimesheetEntryResponse.model_validate(entry)


@router.delete(
    "/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_entry(
    db: DbSession,
    settings: AppSettings,
    confirmation: AdminConfirmation,
    entry_id: Annotated[UUID, Path()],
) -> None:
    await TimesheetService(db, settings).delete_entry(entry_id, confirmation)
