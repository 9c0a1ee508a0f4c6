"""Tests for daily timesheet validation and hours derivation."""

from datetime import date, time
from decimal import Decimal
from uuid import uuid4

import pytest

from branch_payroll.calculators.daily_hours import derive_daily_hours, parse_time
from branch_payroll.calculators.types import TimesheetEntryInput
from branch_payroll.errors import ValidationError
from branch_payroll.models import DayType


def entry(**overrides) -> TimesheetEntryInput:
    fields = {
        "employee_id": uuid4(),
        "entry_date": date(2024, 1, 4),
        "branch": "labasa",
        "day_type": "worked",
        "time_in": "09:00",
        "lunch_in": "13:00",
        "lunch_out": "13:30",
        "time_out": "18:00",
    }
    fields.update(overrides)
    return TimesheetEntryInput(**fields)


class TestParseTime:
    """Test HH:MM parsing."""

    def test_valid_times(self):
        assert parse_time("09:00") == time(9, 0)
        assert parse_time("9:05") == time(9, 5)
        assert parse_time("23:59") == time(23, 59)
        assert parse_time(" 00:00 ") == time(0, 0)

    def test_invalid_times(self):
        assert parse_time("24:00") is None
        assert parse_time("12:60") is None
        assert parse_time("noon") is None
        assert parse_time("1200") is None
        assert parse_time(None) is None


class TestWorkedDay:
    """Test hours derivation for worked days."""

    def test_reference_day(self):
        """09:00-18:00 with a 30 minute lunch is 8.5 net hours."""
        result = derive_daily_hours(entry())

        assert result.gross_work_minutes == 540
        assert result.lunch_minutes == 30
        assert result.net_work_hours == Decimal("8.50")
        assert result.normal_hours == Decimal("8.00")
        assert result.overtime_hours == Decimal("0.50")
        assert result.complete is True

    def test_short_day_no_overtime(self):
        result = derive_daily_hours(entry(time_out="15:00"))

        assert result.normal_hours == Decimal("5.50")
        assert result.overtime_hours == Decimal("0.00")

    def test_fractional_hours_round_to_cents(self):
        """7h 20m net is 7.33 hours."""
        result = derive_daily_hours(entry(time_out="16:50"))

        assert result.normal_hours == Decimal("7.33")

    def test_times_normalized(self):
        result = derive_daily_hours(entry(time_in="9:00"))

        assert result.time_in == "09:00"

    def test_incomplete_entry_allowed(self):
        """Without time out the entry saves with zero hours."""
        result = derive_daily_hours(entry(time_out=None, lunch_in=None, lunch_out=None))

        assert result.complete is False
        assert result.normal_hours == Decimal("0.00")
        assert result.overtime_hours == Decimal("0.00")
        assert result.time_in == "09:00"

    def test_meal_allowance_kept(self):
        result = derive_daily_hours(entry(meal_allowance="7.50"))

        assert result.meal_allowance == Decimal("7.50")

    def test_blank_meal_allowance_is_zero(self):
        result = derive_daily_hours(entry(meal_allowance="  "))

        assert result.meal_allowance == Decimal("0.00")


class TestWorkedDayValidation:
    """Each failed constraint is reported."""

    def errors_for(self, **overrides) -> list[str]:
        with pytest.raises(ValidationError) as exc_info:
            derive_daily_hours(entry(**overrides))
        return exc_info.value.errors

    def test_time_in_required(self):
        assert "Time in is required" in self.errors_for(time_in=None)

    def test_time_in_must_parse(self):
        errors = self.errors_for(time_in="25:00")
        assert any("Time in must be a valid time" in e for e in errors)

    def test_time_out_requires_lunch(self):
        errors = self.errors_for(lunch_in=None, lunch_out="")
        assert "Lunch in is required" in errors
        assert "Lunch out is required" in errors

    def test_time_out_after_time_in(self):
        errors = self.errors_for(time_in="18:00", time_out="09:00", lunch_in="12:00", lunch_out="12:30")
        assert "Time out must be after time in" in errors

    def test_equal_times_rejected(self):
        errors = self.errors_for(time_out="09:00")
        assert "Time out must be after time in" in errors

    def test_lunch_out_after_lunch_in(self):
        errors = self.errors_for(lunch_in="13:30", lunch_out="13:00")
        assert "Lunch out must be after lunch in" in errors

    def test_lunch_inside_work_window(self):
        errors = self.errors_for(lunch_in="08:30", lunch_out="09:30")
        assert "Lunch must fall between time in and time out" in errors

    def test_meal_allowance_must_be_number(self):
        assert "Meal allowance must be a number" in self.errors_for(meal_allowance="abc")

    def test_meal_allowance_not_negative(self):
        assert "Meal allowance must not be negative" in self.errors_for(meal_allowance="-1")

    def test_errors_accumulate(self):
        errors = self.errors_for(time_in="bad", meal_allowance="abc")
        assert len(errors) == 2

    def test_day_type_required(self):
        assert self.errors_for(day_type=None)

    def test_unknown_day_type(self):
        assert self.errors_for(day_type="holiday")


class TestAbsentAndLeave:
    """Test absent and leave days."""

    def test_absent_clears_everything(self):
        result = derive_daily_hours(
            entry(day_type="absent", meal_allowance="10", overtime_reason="late stock")
        )

        assert result.day_type == "absent"
        assert result.time_in is None
        assert result.time_out is None
        assert result.normal_hours == Decimal("0.00")
        assert result.meal_allowance == Decimal("0.00")
        assert result.overtime_reason is None

    def test_absent_ignores_bad_times(self):
        result = derive_daily_hours(entry(day_type="absent", time_in="garbage"))

        assert result.day_type == "absent"

    def test_leave_defaults_to_full_day(self):
        result = derive_daily_hours(entry(day_type="leave", leave_type="annual", meal_allowance="10"))

        assert result.day_type == "leave"
        assert result.leave_type == "annual"
        assert result.normal_hours == Decimal("8.00")
        assert result.overtime_hours == Decimal("0.00")
        assert result.meal_allowance == Decimal("0.00")
        assert result.time_in is None

    def test_unpaid_leave_defaults_to_zero_hours(self):
        result = derive_daily_hours(entry(day_type="leave", leave_type="unpaid"))

        assert result.normal_hours == Decimal("0.00")

    def test_leave_hours_recorded(self):
        result = derive_daily_hours(entry(day_type="leave", leave_type="sick", leave_hours="4.5"))

        assert result.normal_hours == Decimal("4.50")

    def test_leave_type_required(self):
        with pytest.raises(ValidationError) as exc_info:
            derive_daily_hours(entry(day_type="leave"))

        assert "Leave type is required for a leave day" in exc_info.value.errors

    def test_leave_hours_range(self):
        with pytest.raises(ValidationError):
            derive_daily_hours(entry(day_type="leave", leave_type="sick", leave_hours="25"))


class TestLegacyDayType:
    """Test mapping of the old present/absent flags and leave marker."""

    def test_leave_marker(self):
        assert DayType.from_legacy(True, False, "Approved: sick") == (DayType.LEAVE, "sick")

    def test_bare_marker_is_other_leave(self):
        assert DayType.from_legacy(False, False, "Approved: ") == (DayType.LEAVE, "other")

    def test_present_and_absent(self):
        assert DayType.from_legacy(True, False, "stocktake") == (DayType.WORKED, None)
        assert DayType.from_legacy(False, True, None) == (DayType.ABSENT, None)

    def test_unset(self):
        assert DayType.from_legacy(False, False, None) == (None, None)
