"""Thursday-to-Wednesday pay period arithmetic."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

THURSDAY = 3  # date.weekday(): Monday == 0
PERIOD_LENGTH_DAYS = 7


def period_start_for(day: date) -> date:
    """Most recent Thursday on or before ``day``."""
    return day - timedelta(days=(day.weekday() - THURSDAY) % PERIOD_LENGTH_DAYS)


@dataclass(frozen=True, order=True)
class PayPeriod:
    """A business week running Thursday through Wednesday, inclusive."""

    date_from: date
    date_to: date

    def contains(self, day: date) -> bool:
        return self.date_from <= day <= self.date_to

    def is_complete(self, as_of: date) -> bool:
        """True once the period's last day is before ``as_of``."""
        return self.date_to < as_of

    def days(self) -> Iterator[date]:
        current = self.date_from
        while current <= self.date_to:
            yield current
            current += timedelta(days=1)

    @property
    def is_standard_week(self) -> bool:
        return (
            self.date_from.weekday() == THURSDAY
            and (self.date_to - self.date_from).days == PERIOD_LENGTH_DAYS - 1
        )


def pay_period_for(day: date) -> PayPeriod:
    """The pay period containing ``day``."""
    start = period_start_for(day)
    return PayPeriod(start, start + timedelta(days=PERIOD_LENGTH_DAYS - 1))


def periods_between(start: date, end: date) -> list[PayPeriod]:
    """All pay periods overlapping [start, end], oldest first."""
    if end < start:
        return []
    periods = []
    current = pay_period_for(start)
    while current.date_from <= end:
        periods.append(current)
        next_start = current.date_to + timedelta(days=1)
        current = PayPeriod(next_start, next_start + timedelta(days=PERIOD_LENGTH_DAYS - 1))
    return periods
