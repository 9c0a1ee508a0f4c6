"""Tests for Thursday-to-Wednesday pay periods."""

from datetime import date, timedelta

from branch_payroll.calculators.pay_periods import (
    PayPeriod,
    pay_period_for,
    period_start_for,
    periods_between,
)


class TestPeriodStart:
    """Test the Thursday anchor."""

    def test_thursday_is_its_own_start(self):
        assert period_start_for(date(2024, 1, 4)) == date(2024, 1, 4)

    def test_wednesday_belongs_to_previous_thursday(self):
        assert period_start_for(date(2024, 1, 10)) == date(2024, 1, 4)

    def test_monday(self):
        assert period_start_for(date(2024, 1, 8)) == date(2024, 1, 4)

    def test_friday(self):
        assert period_start_for(date(2024, 1, 5)) == date(2024, 1, 4)

    def test_every_day_of_a_fortnight(self):
        for offset in range(14):
            day = date(2024, 1, 4) + timedelta(days=offset)
            start = period_start_for(day)
            assert start.weekday() == 3
            assert 0 <= (day - start).days < 7


class TestPayPeriod:
    """Test pay period helpers."""

    def test_pay_period_for(self):
        period = pay_period_for(date(2024, 1, 7))

        assert period == PayPeriod(date(2024, 1, 4), date(2024, 1, 10))
        assert period.is_standard_week

    def test_contains(self):
        period = pay_period_for(date(2024, 1, 4))

        assert period.contains(date(2024, 1, 10))
        assert not period.contains(date(2024, 1, 11))

    def test_is_complete(self):
        period = pay_period_for(date(2024, 1, 4))

        assert not period.is_complete(date(2024, 1, 10))
        assert period.is_complete(date(2024, 1, 11))

    def test_days(self):
        days = list(pay_period_for(date(2024, 1, 4)).days())

        assert len(days) == 7
        assert days[0] == date(2024, 1, 4)
        assert days[-1] == date(2024, 1, 10)

    def test_periods_between(self):
        periods = periods_between(date(2024, 1, 9), date(2024, 1, 20))

        assert [p.date_from for p in periods] == [
            date(2024, 1, 4),
            date(2024, 1, 11),
            date(2024, 1, 18),
        ]

    def test_periods_between_empty_range(self):
        assert periods_between(date(2024, 1, 20), date(2024, 1, 9)) == []
