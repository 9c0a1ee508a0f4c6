"""Yearly leave allotments and remaining balances.

Each stored leave day counts as one day used. Only days falling inside the
requested calendar year count. Unpaid and other leave have no allotment,
so their remaining balance is ``None``.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

# Days per calendar year; None means unlimited.
LEAVE_ALLOTMENTS: dict[str, int | None] = {
    "annual": 10,
    "sick": 10,
    "bereavement": 5,
    "maternity_paternity": 5,
    "unpaid": None,
    "other": None,
}


@dataclass(frozen=True)
class LeaveBalance:
    """Allotment, usage and remaining days for one leave type."""

    leave_type: str
    allotment: int | None
    used_days: int
    remaining: int | None


def leave_balances(leave_days: Iterable[tuple[date, str | None]], year: int) -> list[LeaveBalance]:
    """Balances for every leave type, in allotment order.

    ``leave_days`` holds (entry_date, leave_type) pairs from leave entries.
    Types outside LEAVE_ALLOTMENTS are not counted.
    """
    used = Counter(leave_type for day, leave_type in leave_days if day.year == year)

    balances = []
    for leave_type, allotment in LEAVE_ALLOTMENTS.items():
        days = used[leave_type]
        remaining = None if allotment is None else max(0, allotment - days)
        balances.append(LeaveBalance(leave_type, allotment, days, remaining))
    return balances
