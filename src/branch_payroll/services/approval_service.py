"""Approval service - lifecycle of timesheet-review and final-wage batches."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from branch_payroll.calculators.types import ZERO, WageInput, round_to_cents, to_decimal
from branch_payroll.calculators.wage_calculator import EditableWage, calculate_wage, recompute
from branch_payroll.config import Settings, get_settings
from branch_payroll.errors import (
    DuplicateError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from branch_payroll.models import Branch, Employee, PaymentMethod, PayPeriodApproval, WageRecord
from branch_payroll.services.aggregator import TimesheetAggregator
from branch_payroll.services.confirmation import verify_confirmation
from branch_payroll.services.state_machine import (
    ApprovalStateMachine,
    ApprovalStatus,
    ReviewType,
)

logger = logging.getLogger(__name__)

_BRANCHES = {b.value for b in Branch}


def _coerce(enum: type[Enum], value: str, label: str) -> str:
    try:
        return enum(value).value
    except ValueError:
        raise ValidationError(f"{label} must be one of: {', '.join(m.value for m in enum)}")


def new_token() -> str:
    """Opaque token for building an external approval link."""
    return uuid4().hex


@dataclass(frozen=True)
class FinalWageLine:
    """One employee's period inputs, ready to submit for final-wage approval.

    hours_worked and overtime_hours are the aggregator's normal and daily
    overtime totals. Rate, FNPF eligibility and threshold are read from the
    employee at submission time. employee_name only orders the lines.
    """

    employee_id: UUID
    date_from: date
    date_to: date
    hours_worked: Decimal
    overtime_hours: Decimal = ZERO
    meal_allowance: Decimal = ZERO
    other_deductions: Decimal = ZERO
    employee_name: str = ""

    @property
    def total_hours(self) -> Decimal:
        return self.hours_worked + self.overtime_hours

    def to_wage_input(self, employee: Employee) -> WageInput:
        return WageInput(
            hourly_wage=employee.hourly_wage,
            hours_worked=self.hours_worked,
            overtime_hours=self.overtime_hours,
            meal_allowance=self.meal_allowance,
            other_deductions=self.other_deductions,
            fnpf_eligible=employee.fnpf_eligible,
            weekly_threshold=employee.weekly_normal_hours_threshold,
        )


@dataclass
class BatchSummary:
    """A batch with totals computed from its member wage records."""

    batch: PayPeriodApproval
    total_wages: Decimal = ZERO
    total_cash_wages: Decimal = ZERO
    total_online_wages: Decimal = ZERO
    record_count: int = 0


class ApprovalService:
    """Service for approval batch lifecycle.

    Operations:
    - request_review: Create or resubmit a timesheet-review batch
    - request_final_wage_approval: Compute and persist a final-wage batch
    - edit_records: Recompute edited wage records and reset the batch to pending
    - delete_batch: Remove a batch and all its wage records
    - set_batch_status / decide_by_token: Record a reviewer's decision
    """

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()

    # Queries

    async def get_batch(self, approval_id: UUID, load_records: bool = False) -> PayPeriodApproval:
        stmt = select(PayPeriodApproval).where(PayPeriodApproval.approval_id == approval_id)
        if load_records:
            stmt = stmt.options(
                selectinload(PayPeriodApproval.wage_records).selectinload(WageRecord.employee)
            )
        batch = (await self.session.execute(stmt)).scalar_one_or_none()
        if batch is None:
            raise NotFoundError("Approval batch", approval_id)
        return batch

    async def get_batch_by_token(self, token: str) -> PayPeriodApproval:
        result = await self.session.execute(
            select(PayPeriodApproval).where(PayPeriodApproval.token == token)
        )
        batch = result.scalar_one_or_none()
        if batch is None:
            # The token itself is never echoed back.
            raise NotFoundError("Approval batch", "for token")
        return batch

    async def get_wage_records(self, approval_id: UUID) -> list[WageRecord]:
        await self.get_batch(approval_id)
        result = await self.session.execute(
            select(WageRecord)
            .where(WageRecord.approval_id == approval_id)
            .options(selectinload(WageRecord.approval))
            .order_by(WageRecord.employee_name)
        )
        return list(result.scalars().all())

    async def get_pay_period_summaries(
        self,
        status: str | None = None,
        review_type: str | None = None,
        branch: str | None = None,
    ) -> list[BatchSummary]:
        """Batches matching the filters, newest period first, with totals."""
        stmt = select(PayPeriodApproval).order_by(
            PayPeriodApproval.date_from.desc(), PayPeriodApproval.created_at.desc()
        )
        if status is not None:
            stmt = stmt.where(PayPeriodApproval.status == _coerce(ApprovalStatus, status, "Status"))
        if review_type is not None:
            stmt = stmt.where(PayPeriodApproval.review_type == _coerce(ReviewType, review_type, "Review type"))
        if branch is not None:
            stmt = stmt.where(PayPeriodApproval.branch == branch)
        batches = list((await self.session.execute(stmt)).scalars().all())
        return await self._summarize(batches)

    async def get_batch_summary(self, approval_id: UUID) -> BatchSummary:
        batch = await self.get_batch(approval_id)
        (summary,) = await self._summarize([batch])
        return summary

    async def _summarize(self, batches: list[PayPeriodApproval]) -> list[BatchSummary]:
        """Attach net pay totals, split by payment method, to each batch."""
        if not batches:
            return []
        totals_stmt = (
            select(
                WageRecord.approval_id,
                Employee.payment_method,
                func.sum(WageRecord.net_pay).label("net"),
                func.count(WageRecord.wage_record_id).label("records"),
            )
            .join(Employee, Employee.employee_id == WageRecord.employee_id)
            .where(WageRecord.approval_id.in_([b.approval_id for b in batches]))
            .group_by(WageRecord.approval_id, Employee.payment_method)
        )
        summaries = {b.approval_id: BatchSummary(batch=b) for b in batches}
        for row in (await self.session.execute(totals_stmt)).all():
            summary = summaries[row.approval_id]
            net = round_to_cents(to_decimal(row.net))
            summary.total_wages += net
            summary.record_count += row.records
            if row.payment_method == PaymentMethod.ONLINE:
                summary.total_online_wages += net
            else:
                summary.total_cash_wages += net
        return list(summaries.values())

    # Validation helpers

    @staticmethod
    def _validate_key(date_from: date, date_to: date, branch: str | None, initiated_by: str | None) -> None:
        errors = []
        if date_to < date_from:
            errors.append("Date to must not be before date from")
        if branch is not None and branch not in _BRANCHES:
            errors.append(f"Branch must be one of: {', '.join(sorted(_BRANCHES))}")
        if initiated_by is not None and not initiated_by.strip():
            errors.append("Initiated by is required")
        if errors:
            raise ValidationError(errors)

    async def _find_batches(
        self,
        date_from: date,
        date_to: date,
        review_type: str,
        branches: Sequence[str | None],
        statuses: Sequence[str],
    ) -> list[PayPeriodApproval]:
        branch_clauses = [
            PayPeriodApproval.branch.is_(None) if b is None else PayPeriodApproval.branch == b
            for b in branches
        ]
        result = await self.session.execute(
            select(PayPeriodApproval)
            .where(
                PayPeriodApproval.date_from == date_from,
                PayPeriodApproval.date_to == date_to,
                PayPeriodApproval.review_type == review_type,
                PayPeriodApproval.status.in_([ApprovalStatus(s).value for s in statuses]),
                or_(*branch_clauses),
            )
            .order_by(PayPeriodApproval.created_at.desc())
        )
        return list(result.scalars().all())

    async def _flush_batch(self, batch: PayPeriodApproval) -> None:
        """Flush, surfacing the active-key unique index as DuplicateError."""
        try:
            await self.session.flush()
        except IntegrityError as exc:
            logger.warning(
                "Rejected %s batch for %s..%s (%s): storage uniqueness violation",
                batch.review_type, batch.date_from, batch.date_to, batch.branch_key,
            )
            raise DuplicateError(
                f"An active {batch.review_type} batch already exists for "
                f"{batch.date_from}..{batch.date_to} ({batch.branch_key})"
            ) from exc

    @staticmethod
    def _overlapping_branches(branch: str | None) -> list[str | None]:
        """Branch slots a batch occupies: a merged batch covers both branches."""
        return [None] + sorted(_BRANCHES) if branch is None else [branch, None]

    async def _check_final_wage_overlap(self, date_from: date, date_to: date, branch: str | None) -> None:
        existing = await self._find_batches(
            date_from,
            date_to,
            ReviewType.FINAL_WAGE.value,
            self._overlapping_branches(branch),
            ApprovalStateMachine.ACTIVE,
        )
        if existing:
            conflict = existing[0]
            logger.warning(
                "Rejected final wage batch for %s..%s (%s): batch %s is %s",
                date_from, date_to, branch or "all", conflict.approval_id, conflict.status,
            )
            raise StateConflictError(
                f"A final wage batch for {date_from}..{date_to} "
                f"({conflict.branch_key}) already exists or is approved",
                approval_id=conflict.approval_id,
            )

    # Timesheet reviews

    async def request_review(
        self,
        date_from: date,
        date_to: date,
        initiated_by: str,
        branch: str | None,
        confirmation: str | None,
    ) -> PayPeriodApproval:
        """Create a pending timesheet-review batch with a fresh token.

        A declined review for the same key is resubmitted instead: new token,
        status back to pending. An active review for the key is a conflict,
        and so is one for an overlapping slot: a merged review blocks both
        branches, and either branch's review blocks a merged request.
        """
        verify_confirmation(confirmation, self.settings, "timesheet review request")
        self._validate_key(date_from, date_to, branch, initiated_by)
        review_type = ReviewType.TIMESHEET_REVIEW.value

        active = await self._find_batches(
            date_from,
            date_to,
            review_type,
            self._overlapping_branches(branch),
            ApprovalStateMachine.ACTIVE,
        )
        if active:
            existing = active[0]
            logger.warning(
                "Rejected timesheet review for %s..%s (%s): batch %s is %s",
                date_from, date_to, existing.branch_key, existing.approval_id, existing.status,
            )
            raise StateConflictError(
                f"A timesheet review for {date_from}..{date_to} ({existing.branch_key}) "
                f"is already {existing.status}",
                approval_id=existing.approval_id,
            )

        declined = await self._find_batches(
            date_from, date_to, review_type, [branch], [ApprovalStatus.DECLINED]
        )
        if declined:
            batch = declined[0]
            ApprovalStateMachine.validate_transition(
                batch.status, ApprovalStatus.PENDING, approval_id=batch.approval_id
            )
            batch.status = ApprovalStatus.PENDING.value
            batch.token = new_token()
            batch.initiated_by = initiated_by.strip()
            batch.decided_by = None
            batch.decided_at = None
            await self._flush_batch(batch)
            logger.info("Resubmitted timesheet review %s", batch.approval_id)
            return batch

        batch = PayPeriodApproval(
            date_from=date_from,
            date_to=date_to,
            branch=branch,
            status=ApprovalStatus.PENDING.value,
            review_type=review_type,
            initiated_by=initiated_by.strip(),
            token=new_token(),
        )
        self.session.add(batch)
        await self._flush_batch(batch)
        logger.info(
            "Created timesheet review %s for %s..%s (%s)",
            batch.approval_id, date_from, date_to, batch.branch_key,
        )
        return batch

    # Final wages

    async def prepare_final_wage_inputs(
        self,
        date_from: date,
        date_to: date,
        branch: str | None,
        other_deductions: Mapping[UUID, Any] | None = None,
    ) -> list[FinalWageLine]:
        """Aggregate a period's hours into submission lines, one per employee.

        Employees with no hours in range are skipped.
        """
        self._validate_key(date_from, date_to, branch, None)
        other_deductions = other_deductions or {}

        hours = await TimesheetAggregator(self.session).get_hours_for_period(date_from, date_to, branch)
        hours = [h for h in hours if h.total_hours > 0]
        if not hours:
            return []

        result = await self.session.execute(
            select(Employee).where(Employee.employee_id.in_([h.employee_id for h in hours]))
        )
        employees = {e.employee_id: e for e in result.scalars().all()}

        lines = []
        for summary in hours:
            employee = employees[summary.employee_id]
            try:
                deduction = to_decimal(other_deductions.get(summary.employee_id))
            except ValueError:
                raise ValidationError(f"Other deductions for {employee.name} must be a number")
            lines.append(
                FinalWageLine(
                    employee_id=employee.employee_id,
                    date_from=date_from,
                    date_to=date_to,
                    hours_worked=summary.total_normal_hours,
                    overtime_hours=summary.total_overtime_hours,
                    meal_allowance=summary.total_meal_allowance,
                    other_deductions=deduction,
                    employee_name=employee.name,
                )
            )
        return sorted(lines, key=lambda line: line.employee_name)

    async def request_final_wage_approval(
        self,
        lines: Sequence[FinalWageLine],
        initiated_by: str,
        branch: str | None,
        confirmation: str | None,
    ) -> PayPeriodApproval:
        """Compute wages for ``lines`` and persist them as a pending batch.

        Fails if a pending or approved final-wage batch already covers the
        period for this branch, for the merged scope, or (for a merged
        request) for either branch.
        """
        verify_confirmation(confirmation, self.settings, "final wage request")
        if not lines:
            raise ValidationError("Cannot submit an empty wage batch")
        periods = {(line.date_from, line.date_to) for line in lines}
        if len(periods) != 1:
            raise ValidationError("All wage lines must cover the same pay period")
        employee_ids = [line.employee_id for line in lines]
        if len(set(employee_ids)) != len(employee_ids):
            raise ValidationError("Each employee may appear only once in a wage batch")
        date_from, date_to = next(iter(periods))
        self._validate_key(date_from, date_to, branch, initiated_by)
        review_type = ReviewType.FINAL_WAGE.value

        await self._check_final_wage_overlap(date_from, date_to, branch)

        result = await self.session.execute(
            select(Employee).where(Employee.employee_id.in_(employee_ids))
        )
        employees = {e.employee_id: e for e in result.scalars().all()}
        missing = [eid for eid in employee_ids if eid not in employees]
        if missing:
            raise NotFoundError("Employee", missing[0])

        batch = PayPeriodApproval(
            date_from=date_from,
            date_to=date_to,
            branch=branch,
            status=ApprovalStatus.PENDING.value,
            review_type=review_type,
            initiated_by=initiated_by.strip(),
            token=new_token(),
        )
        self.session.add(batch)
        await self._flush_batch(batch)

        for line in lines:
            employee = employees[line.employee_id]
            breakdown = calculate_wage(line.to_wage_input(employee))
            self.session.add(
                WageRecord(
                    approval_id=batch.approval_id,
                    employee_id=employee.employee_id,
                    employee_name=employee.name,
                    hourly_wage=employee.hourly_wage,
                    total_hours=breakdown.total_hours,
                    hours_worked=breakdown.normal_hours,
                    overtime_hours=breakdown.overtime_hours,
                    meal_allowance=breakdown.meal_allowance,
                    other_deductions=breakdown.other_deductions,
                    gross_pay=breakdown.gross_pay,
                    fnpf_deduction=breakdown.fnpf_deduction,
                    net_pay=breakdown.net_pay,
                    date_from=date_from,
                    date_to=date_to,
                )
            )
        await self.session.flush()
        logger.info(
            "Created final wage batch %s for %s..%s (%s) with %d records",
            batch.approval_id, date_from, date_to, batch.branch_key, len(lines),
        )
        return batch

    async def edit_records(
        self,
        approval_id: UUID,
        updates: Mapping[UUID, Mapping[str, Any]],
        confirmation: str | None,
    ) -> PayPeriodApproval:
        """Apply edits to wage records, recompute them, and reset the batch to pending.

        ``updates`` maps wage record id to {field: new value}; the editable
        fields are total hours, meal allowance and other deductions.
        """
        verify_confirmation(confirmation, self.settings, "wage record edit")
        if not updates:
            raise ValidationError("No wage record changes supplied")

        batch = await self.get_batch(approval_id, load_records=True)
        if batch.review_type != ReviewType.FINAL_WAGE:
            raise StateConflictError(
                "Only final wage batches have editable wage records", approval_id=approval_id
            )
        records = {r.wage_record_id: r for r in batch.wage_records}
        for record_id in updates:
            if record_id not in records:
                raise NotFoundError("Wage record", record_id)

        ApprovalStateMachine.validate_transition(
            batch.status, ApprovalStatus.PENDING, approval_id=approval_id
        )
        if batch.status == ApprovalStatus.DECLINED:
            # Reactivating a declined batch needs its slot free again.
            await self._check_final_wage_overlap(batch.date_from, batch.date_to, batch.branch)

        for record_id, changes in updates.items():
            record = records[record_id]
            edited = EditableWage.from_inputs(
                hourly_wage=record.hourly_wage,
                weekly_threshold=record.employee.weekly_normal_hours_threshold,
                fnpf_eligible=record.employee.fnpf_eligible,
                total_hours=record.total_hours,
                meal_allowance=record.meal_allowance,
                other_deductions=record.other_deductions,
            )
            for changed_field, value in changes.items():
                edited = recompute(edited, changed_field, value)

            record.total_hours = round_to_cents(edited.total_hours)
            record.meal_allowance = round_to_cents(edited.meal_allowance)
            record.other_deductions = round_to_cents(edited.other_deductions)
            record.hours_worked = edited.hours_worked
            record.overtime_hours = edited.overtime_hours
            record.fnpf_deduction = edited.fnpf_deduction
            record.gross_pay = edited.gross_pay
            record.net_pay = edited.net_pay

        previous = batch.status
        batch.status = ApprovalStatus.PENDING.value
        batch.decided_by = None
        batch.decided_at = None
        await self._flush_batch(batch)
        logger.info(
            "Edited %d wage records in batch %s; status %s -> pending",
            len(updates), approval_id, previous,
        )
        return batch

    async def delete_batch(self, approval_id: UUID, confirmation: str | None) -> None:
        """Delete a batch and every wage record it owns. Irreversible."""
        verify_confirmation(confirmation, self.settings, "batch delete")
        batch = await self.get_batch(approval_id, load_records=True)
        record_count = len(batch.wage_records)
        # Records go through the delete-orphan cascade on the loaded collection.
        await self.session.delete(batch)
        await self.session.flush()
        logger.info("Deleted batch %s and %d wage records", approval_id, record_count)

    # Decisions

    async def set_batch_status(
        self,
        approval_id: UUID,
        status: str,
        decided_by: str | None = None,
    ) -> PayPeriodApproval:
        """Record an approve/decline decision on a pending batch."""
        batch = await self.get_batch(approval_id)
        return await self._decide(batch, status, decided_by)

    async def decide_by_token(self, token: str, status: str, decided_by: str | None = None) -> PayPeriodApproval:
        batch = await self.get_batch_by_token(token)
        return await self._decide(batch, status, decided_by)

    async def _decide(self, batch: PayPeriodApproval, status: str, decided_by: str | None) -> PayPeriodApproval:
        if not ApprovalStateMachine.is_decision(status):
            raise ValidationError("Decision must be 'approved' or 'declined'")
        status = ApprovalStatus(status).value
        try:
            ApprovalStateMachine.validate_transition(
                batch.status, status, approval_id=batch.approval_id
            )
        except StateConflictError:
            logger.warning(
                "Rejected decision on batch %s: %s -> %s", batch.approval_id, batch.status, status
            )
            raise
        batch.status = status
        batch.decided_by = decided_by.strip() if decided_by else None
        batch.decided_at = datetime.now(timezone.utc)
        await self.session.flush()
        logger.info("Batch %s %s", batch.approval_id, status)
        return batch
