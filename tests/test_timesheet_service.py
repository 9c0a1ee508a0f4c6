"""Tests for timesheet entry persistence."""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from branch_payroll.calculators.types import TimesheetEntryInput
from branch_payroll.errors import ConfirmationError, NotFoundError, ValidationError
from branch_payroll.models import DailyTimesheetRecord
from branch_payroll.services.timesheet_service import TimesheetService
from tests.conftest import ADMIN_SECRET, WEEK_END, WEEK_START


def worked(employee, entry_date=WEEK_START, **overrides) -> TimesheetEntryInput:
    fields = {
        "employee_id": employee.employee_id,
        "entry_date": entry_date,
        "branch": employee.branch,
        "day_type": "worked",
        "time_in": "09:00",
        "lunch_in": "13:00",
        "lunch_out": "13:30",
        "time_out": "18:00",
    }
    fields.update(overrides)
    return TimesheetEntryInput(**fields)


class TestUpsertEntry:
    """Test insert-or-update by (employee, date)."""

    async def test_insert_derives_hours(self, session, settings, make_employee):
        employee = await make_employee()
        service = TimesheetService(session, settings)

        entry_id = await service.upsert_entry(worked(employee))

        record = await session.get(DailyTimesheetRecord, entry_id)
        assert record.normal_hours == Decimal("8.00")
        assert record.overtime_hours == Decimal("0.50")
        assert record.time_in == "09:00"
        assert record.is_complete

    async def test_second_save_updates_same_record(self, session, settings, make_employee):
        employee = await make_employee()
        service = TimesheetService(session, settings)

        first = await service.upsert_entry(worked(employee, time_out=None, lunch_in=None, lunch_out=None))
        second = await service.upsert_entry(worked(employee, time_out="15:00"))

        assert first == second
        entries = await service.list_entries(WEEK_START, WEEK_END)
        assert len(entries) == 1
        assert entries[0].normal_hours == Decimal("5.50")

    async def test_switch_to_leave_clears_times(self, session, settings, make_employee):
        employee = await make_employee()
        service = TimesheetService(session, settings)
        await service.upsert_entry(worked(employee, meal_allowance="5"))

        await service.upsert_entry(worked(employee, day_type="leave", leave_type="sick"))

        record = await service.get_entry(employee.employee_id, WEEK_START)
        assert record.day_type == "leave"
        assert record.leave_type == "sick"
        assert record.time_in is None
        assert record.overtime_hours == Decimal("0.00")
        assert record.meal_allowance == Decimal("0.00")

    async def test_unknown_employee(self, session, settings, make_employee):
        employee = await make_employee()
        entry = worked(employee, employee_id=uuid4())

        with pytest.raises(NotFoundError):
            await TimesheetService(session, settings).upsert_entry(entry)

    async def test_inactive_employee_rejected(self, session, settings, make_employee):
        employee = await make_employee(is_active=False)

        with pytest.raises(ValidationError):
            await TimesheetService(session, settings).upsert_entry(worked(employee))

    async def test_branch_mismatch_rejected(self, session, settings, make_employee):
        employee = await make_employee(branch="suva")

        with pytest.raises(ValidationError) as exc_info:
            await TimesheetService(session, settings).upsert_entry(worked(employee, branch="labasa"))

        assert "belongs to branch suva" in exc_info.value.errors[0]

    async def test_invalid_entry_not_stored(self, session, settings, make_employee):
        employee = await make_employee()
        service = TimesheetService(session, settings)

        with pytest.raises(ValidationError):
            await service.upsert_entry(worked(employee, time_out="08:00"))

        assert await service.get_entry(employee.employee_id, WEEK_START) is None


class TestListAndDelete:
    """Test listing and confirmed deletion."""

    async def test_list_filters(self, session, settings, make_employee):
        labasa = await make_employee(name="A", branch="labasa")
        suva = await make_employee(name="B", branch="suva")
        service = TimesheetService(session, settings)
        await service.upsert_entry(worked(labasa))
        await service.upsert_entry(worked(suva))
        await service.upsert_entry(worked(suva, entry_date=date(2024, 1, 12)))

        assert len(await service.list_entries(WEEK_START, WEEK_END)) == 2
        assert len(await service.list_entries(WEEK_START, WEEK_END, branch="suva")) == 1
        assert len(await service.list_entries(WEEK_START, date(2024, 1, 31), employee_id=suva.employee_id)) == 2

    async def test_delete_with_confirmation(self, session, settings, make_employee):
        employee = await make_employee()
        service = TimesheetService(session, settings)
        entry_id = await service.upsert_entry(worked(employee))

        await service.delete_entry(entry_id, ADMIN_SECRET)

        assert await service.get_entry(employee.employee_id, WEEK_START) is None

    async def test_delete_wrong_confirmation_keeps_entry(self, session, settings, make_employee):
        employee = await make_employee()
        service = TimesheetService(session, settings)
        entry_id = await service.upsert_entry(worked(employee))

        with pytest.raises(ConfirmationError):
            await service.delete_entry(entry_id, "wrong")

        assert await service.get_entry(employee.employee_id, WEEK_START) is not None

    async def test_delete_unknown_entry(self, session, settings):
        with pytest.raises(NotFoundError):
            await TimesheetService(session, settings).delete_entry(uuid4(), ADMIN_SECRET)


class TestLeaveBalances:
    """Test yearly leave balances from stored leave entries."""

    async def test_counts_only_this_employees_leave_in_year(self, session, settings, make_employee, add_entry):
        employee = await make_employee(name="A")
        colleague = await make_employee(name="B")
        for offset in range(3):
            await add_entry(employee, WEEK_START + timedelta(days=offset), day_type="leave", leave_type="annual")
        await add_entry(employee, date(2024, 2, 1), day_type="leave", leave_type="unpaid", normal_hours="0")
        await add_entry(employee, date(2023, 12, 28), day_type="leave", leave_type="annual")
        await add_entry(employee, date(2024, 2, 2))
        await add_entry(colleague, WEEK_START, day_type="leave", leave_type="annual")

        balances = await TimesheetService(session, settings).get_leave_balances(employee.employee_id, 2024)

        by_type = {b.leave_type: b for b in balances}
        assert by_type["annual"].used_days == 3
        assert by_type["annual"].remaining == 7
        assert by_type["unpaid"].used_days == 1
        assert by_type["unpaid"].remaining is None
        assert by_type["sick"].remaining == 10

    async def test_unknown_employee(self, session, settings):
        with pytest.raises(NotFoundError):
            await TimesheetService(session, settings).get_leave_balances(uuid4(), 2024)
