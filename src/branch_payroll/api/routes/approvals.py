"""Approval batch endpoints: timesheet reviews and final wages."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from branch_payroll.api.dependencies import AdminConfirmation, AppSettings, DbSession
from branch_payroll.api.schemas import (
    BatchResponse,
    BatchSummaryResponse,
    DecisionRequest,
    ErrorResponse,
    FinalWageRequest,
    PeriodOptionResponse,
    ReviewRequest,
    WageRecordEditRequest,
    WageRecordResponse,
)
from branch_payroll.errors import ValidationError
from branch_payroll.services.approval_service import ApprovalService, BatchSummary
from branch_payroll.services.eligibility import EligibilityService

router = APIRouter(prefix="/approvals", tags=["approvals"])


def _summary_response(summary: BatchSummary) -> BatchSummaryResponse:
    return BatchSummaryResponse(
        **BatchResponse.model_validate(summary.batch).model_dump(),
        total_wages=summary.total_wages,
        total_cash_wages=summary.total_cash_wages,
        total_online_wages=summary.total_online_wages,
        record_count=summary.record_count,
    )


# ============================================================================
# Listing and eligibility
# ============================================================================


@router.get("", response_model=list[BatchSummaryResponse])
async def list_batches(
    db: DbSession,
    settings: AppSettings,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    review_type: Annotated[str | None, Query()] = None,
    branch: Annotated[str | None, Query()] = None,
) -> list[BatchSummaryResponse]:
    """Pay period summaries with wage totals."""
    summaries = await ApprovalService(db, settings).get_pay_period_summaries(
        status_filter, review_type, branch
    )
    return [_summary_response(s) for s in summaries]


@router.get(
    "/eligible-periods",
    response_model=list[PeriodOptionResponse],
    responses={422: {"model": ErrorResponse}},
)
async def get_eligible_periods(
    db: DbSession,
    review_type: Annotated[str, Query()],
    branch: Annotated[str | None, Query()] = None,
    as_of: Annotated[date | None, Query()] = None,
) -> list[PeriodOptionResponse]:
    """Periods that may be submitted for the given review type."""
    options = await EligibilityService(db).get_eligible_periods(review_type, branch, as_of)
    return [PeriodOptionResponse.model_validate(o) for o in options]


# ============================================================================
# Submissions
# ============================================================================


@router.post(
    "/reviews",
    response_model=BatchResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def request_review(
    db: DbSession,
    settings: AppSettings,
    confirmation: AdminConfirmation,
    payload: ReviewRequest,
) -> BatchResponse:
    """Submit a timesheet period for review, or resubmit a declined one."""
    batch = await ApprovalService(db, settings).request_review(
        payload.date_from,
        payload.date_to,
        payload.initiated_by,
        payload.branch,
        confirmation,
    )
    return BatchResponse.model_validate(batch)


@router.post(
    "/final-wages",
    response_model=BatchSummaryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def request_final_wage_approval(
    db: DbSession,
    settings: AppSettings,
    confirmation: AdminConfirmation,
    payload: FinalWageRequest,
) -> BatchSummaryResponse:
    """Compute a period's wages and submit them as a pending batch."""
    service = ApprovalService(db, settings)
    lines = await service.prepare_final_wage_inputs(
        payload.date_from, payload.date_to, payload.branch, payload.other_deductions
    )
    if not lines:
        raise ValidationError(
            f"No timesheet hours recorded for {payload.date_from}..{payload.date_to}"
        )
    batch = await service.request_final_wage_approval(
        lines, payload.initiated_by, payload.branch, confirmation
    )
    return _summary_response(await service.get_batch_summary(batch.approval_id))


# ============================================================================
# Token-based decisions
# ============================================================================


@router.get(
    "/by-token/{token}",
    response_model=BatchResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_batch_by_token(
    db: DbSession,
    settings: AppSettings,
    token: Annotated[str, Path()],
) -> BatchResponse:
    batch = await ApprovalService(db, settings).get_batch_by_token(token)
    return BatchResponse.model_validate(batch)


@router.post(
    "/by-token/{token}/decision",
    response_model=BatchResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def decide_by_token(
    db: DbSession,
    settings: AppSettings,
    token: Annotated[str, Path()],
    payload: DecisionRequest,
) -> BatchResponse:
    """Approve or decline a pending batch through its approval link."""
    batch = await ApprovalService(db, settings).decide_by_token(
        token, payload.status, payload.decided_by
    )
    return BatchResponse.model_validate(batch)


# ============================================================================
# Single batch
# ============================================================================


@router.get(
    "/{approval_id}",
    response_model=BatchResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_batch(
    db: DbSession,
    settings: AppSettings,
    approval_id: Annotated[UUID, Path()],
) -> BatchResponse:
    batch = await ApprovalService(db, settings).get_batch(approval_id)
    return BatchResponse.model_validate(batch)


@router.get(
    "/{approval_id}/records",
    response_model=list[WageRecordResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_wage_records(
    db: DbSession,
    settings: AppSettings,
    approval_id: Annotated[UUID, Path()],
) -> list[WageRecordResponse]:
    records = await ApprovalService(db, settings).get_wage_records(approval_id)
    return [WageRecordResponse.model_validate(r) for r in records]


@router.patch(
    "/{approval_id}/records",
    response_model=BatchResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def edit_wage_records(
    db: DbSession,
    settings: AppSettings,
    confirmation: AdminConfirmation,
    approval_id: Annotated[UUID, Path()],
    payload: WageRecordEditRequest,
) -> BatchResponse:
    """Edit wage records; the batch returns to pending and must be re-approved."""
    updates = {
        edit.wage_record_id: edit.model_dump(exclude={"wage_record_id"}, exclude_none=True)
        for edit in payload.records
    }
    batch = await ApprovalService(db, settings).edit_records(approval_id, updates, confirmation)
    return BatchResponse.model_validate(batch)


@router.delete(
    "/{approval_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_batch(
    db: DbSession,
    settings: AppSettings,
    confirmation: AdminConfirmation,
    approval_id: Annotated[UUID, Path()],
) -> None:
    """Delete a batch and all of its wage records."""
    await ApprovalService(db, settings).delete_batch(approval_id, confirmation)
