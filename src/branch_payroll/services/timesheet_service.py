"""Daily timesheet store with upsert-by-(employee, date) semantics."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from branch_payroll.calculators.daily_hours import derive_daily_hours
from branch_payroll.calculators.leave_balances import LeaveBalance, leave_balances
from branch_payroll.calculators.types import TimesheetEntryInput
from branch_payroll.config import Settings, get_settings
from branch_payroll.errors import NotFoundError, ValidationError
from branch_payroll.models import DailyTimesheetRecord, DayType, Employee
from branch_payroll.services.confirmation import verify_confirmation

logger = logging.getLogger(__name__)


class TimesheetService:
    """Validate, derive, and persist daily timesheet entries."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()

    async def get_entry(self, employee_id: UUID, entry_date: date) -> DailyTimesheetRecord | None:
        result = await self.session.execute(
            select(DailyTimesheetRecord).where(
                DailyTimesheetRecord.employee_id == employee_id,
                DailyTimesheetRecord.entry_date == entry_date,
            )
        )
        return result.scalar_one_or_none()

    async def upsert_entry(self, entry: TimesheetEntryInput) -> UUID:
        """Validate an entry, derive its hours, and insert or update it.

        Returns the entry id. An existing record for the same employee and
        date is updated in place.
        """
        employee = await self.session.get(Employee, entry.employee_id)
        if employee is None:
            raise NotFoundError("Employee", entry.employee_id)

        errors = []
        if not employee.is_active:
            errors.append(f"Employee {employee.name} is inactive")
        if entry.branch != employee.branch:
            errors.append(f"Employee {employee.name} belongs to branch {employee.branch}, not {entry.branch}")
        if errors:
            logger.warning("Rejected timesheet entry for employee %s: %s", employee.employee_id, "; ".join(errors))
            raise ValidationError(errors)

        hours = derive_daily_hours(entry)

        record = await self.get_entry(entry.employee_id, entry.entry_date)
        created = record is None
        if created:
            record = DailyTimesheetRecord(
                employee_id=entry.employee_id,
                entry_date=entry.entry_date,
            )
            self.session.add(record)

        record.branch = entry.branch
        record.day_type = hours.day_type
        record.leave_type = hours.leave_type
        record.time_in = hours.time_in
        record.lunch_in = hours.lunch_in
        record.lunch_out = hours.lunch_out
        record.time_out = hours.time_out
        record.normal_hours = hours.normal_hours
        record.overtime_hours = hours.overtime_hours
        record.meal_allowance = hours.meal_allowance
        record.overtime_reason = hours.overtime_reason

        await self.session.flush()
        logger.info(
            "%s timesheet entry %s for employee %s on %s",
            "Created" if created else "Updated",
            record.entry_id,
            entry.employee_id,
            entry.entry_date,
        )
        return record.entry_id

    async def list_entries(
        self,
        date_from: date,
        date_to: date,
        branch: str | None = None,
        employee_id: UUID | None = None,
    ) -> list[DailyTimesheetRecord]:
        stmt = (
            select(DailyTimesheetRecord)
            .where(
                DailyTimesheetRecord.entry_date >= date_from,
                DailyTimesheetRecord.entry_date <= date_to,
            )
            .order_by(DailyTimesheetRecord.entry_date, DailyTimesheetRecord.employee_id)
        )
        if branch is not None:
            stmt = stmt.where(DailyTimesheetRecord.branch == branch)
        if employee_id is not None:
            stmt = stmt.where(DailyTimesheetRecord.employee_id == employee_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_leave_balances(self, employee_id: UUID, year: int) -> list[LeaveBalance]:
        """Remaining leave per type for ``year``, from the employee's leave entries."""
        if await self.session.get(Employee, employee_id) is None:
            raise NotFoundError("Employee", employee_id)
        result = await self.session.execute(
            select(DailyTimesheetRecord.entry_date, DailyTimesheetRecord.leave_type).where(
                DailyTimesheetRecord.employee_id == employee_id,
                DailyTimesheetRecord.day_type == DayType.LEAVE.value,
                DailyTimesheetRecord.entry_date >= date(year, 1, 1),
                DailyTimesheetRecord.entry_date <= date(year, 12, 31),
            )
        )
        return leave_balances(result.tuples().all(), year)

    async def delete_entry(self, entry_id: UUID, confirmation: str | None) -> None:
        verify_confirmation(confirmation, self.settings, "timesheet delete")
        record = await self.session.get(DailyTimesheetRecord, entry_id)
        if record is None:
            raise NotFoundError("Timesheet entry", entry_id)
        await self.session.delete(record)
        await self.session.flush()
        logger.info("Deleted timesheet entry %s", entry_id)
