"""Pay-period aggregation of daily timesheet entries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import case, func, literal, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from branch_payroll.calculators.types import round_to_cents, to_decimal
from branch_payroll.models import DailyTimesheetRecord, DayType
from branch_payroll.models.timesheet import LEGACY_LEAVE_PREFIX


@dataclass(frozen=True)
class AggregatedHours:
    """Per-employee hour totals for a date range.

    total_hours is the raw total; the weekly normal/overtime split happens
    in the wage calculator.
    """

    employee_id: UUID
    total_hours: Decimal
    total_normal_hours: Decimal
    total_overtime_hours: Decimal
    total_meal_allowance: Decimal
    days_recorded: int


class TimesheetAggregator:
    """Sum daily entries into per-employee period totals."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_hours_for_period(
        self,
        date_from: date,
        date_to: date,
        branch: str | None = None,
        employee_id: UUID | None = None,
    ) -> list[AggregatedHours]:
        """One row per employee with entries in [date_from, date_to].

        Leave days count their recorded normal hours only: overtime and meal
        allowance stored on them are ignored. Employees with no entries in
        range are absent from the result.
        """
        ts = DailyTimesheetRecord
        is_leave = or_(
            ts.day_type == DayType.LEAVE.value,
            ts.overtime_reason.like(f"{LEGACY_LEAVE_PREFIX}%"),
        )
        zero = literal(0)
        overtime = case((is_leave, zero), else_=ts.overtime_hours)
        meal = case((is_leave, zero), else_=ts.meal_allowance)

        stmt = (
            select(
                ts.employee_id,
                func.coalesce(func.sum(ts.normal_hours), 0).label("normal"),
                func.coalesce(func.sum(overtime), 0).label("overtime"),
                func.coalesce(func.sum(meal), 0).label("meal"),
                func.count(ts.entry_id).label("days"),
            )
            .where(ts.entry_date >= date_from, ts.entry_date <= date_to)
            .group_by(ts.employee_id)
        )
        if branch is not None:
            stmt = stmt.where(ts.branch == branch)
        if employee_id is not None:
            stmt = stmt.where(ts.employee_id == employee_id)

        result = await self.session.execute(stmt)

        summaries = []
        for row in result.all():
            normal = round_to_cents(to_decimal(row.normal))
            overtime_total = round_to_cents(to_decimal(row.overtime))
            summaries.append(
                AggregatedHours(
                    employee_id=row.employee_id,
                    total_hours=normal + overtime_total,
                    total_normal_hours=normal,
                    total_overtime_hours=overtime_total,
                    total_meal_allowance=round_to_cents(to_decimal(row.meal)),
                    days_recorded=row.days,
                )
            )
        return summaries
