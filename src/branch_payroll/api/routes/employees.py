"""Employee registry endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from branch_payroll.api.dependencies import AdminConfirmation, AppSettings, DbSession
from branch_payroll.api.schemas import EmployeeResponse, EmployeeWrite, ErrorResponse
from branch_payroll.services.employee_service import EmployeeService

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=list[EmployeeResponse])
async def list_employees(
    db: DbSession,
    settings: AppSettings,
    include_inactive: Annotated[bool, Query()] = False,
) -> list[EmployeeResponse]:
    """List employees, active only unless asked otherwise."""
    employees = await EmployeeService(db, settings).list_employees(include_inactive)
    return [EmployeeResponse.model_validate(e) for e in employees]


@router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_employee(
    db: DbSession,
    settings: AppSettings,
    confirmation: AdminConfirmation,
    payload: EmployeeWrite,
) -> EmployeeResponse:
    employee = await EmployeeService(db, settings).create_employee(
        payload.model_dump(exclude={"is_active"}), confirmation
    )
    return EmployeeResponse.model_validate(employee)


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_employee(
    db: DbSession,
    settings: AppSettings,
    employee_id: Annotated[UUID, Path()],
) -> EmployeeResponse:
    employee = await EmployeeService(db, settings).get_employee(employee_id)
    return EmployeeResponse.model_validate(employee)


@router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_employee(
    db: DbSession,
    settings: AppSettings,
    confirmation: AdminConfirmation,
    employee_id: Annotated[UUID, Path()],
    payload: EmployeeWrite,
) -> EmployeeResponse:
    employee = await EmployeeService(db, settings).update_employee(
        employee_id, payload.model_dump(exclude_none=True), confirmation
    )
    return EmployeeResponse.model_validate(employee)


@router.post(
    "/{employee_id}/deactivate",
    response_model=EmployeeResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def deactivate_employee(
    db: DbSession,
    settings: AppSettings,
    confirmation: AdminConfirmation,
    employee_id: Annotated[UUID, Path()],
) -> EmployeeResponse:
    """Deactivate an employee. Employees are never deleted."""
    employee = await EmployeeService(db, settings).deactivate_employee(employee_id, confirmation)
    return EmployeeResponse.model_validate(employee)
