"""Period eligibility: which weeks may be submitted for review or final wages.

Keys are (date_from, date_to, branch) with branch None meaning a batch merged
across both branches. The rules themselves are pure functions over sets of
keys; EligibilityService only gathers those sets from the store.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from sqlalchemy import and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from branch_payroll.calculators.pay_periods import PayPeriod, pay_period_for
from branch_payroll.errors import ValidationError
from branch_payroll.models import MERGED_BRANCH_KEY, Branch, DailyTimesheetRecord, DayType, PayPeriodApproval
from branch_payroll.services.state_machine import ApprovalStateMachine, ApprovalStatus, ReviewType

BRANCHES = frozenset(b.value for b in Branch)

PeriodKey = tuple[date, date, str | None]


@dataclass(frozen=True)
class PeriodOption:
    """A period/branch combination that may be submitted."""

    date_from: date
    date_to: date
    branch: str | None
    review_type: str

    @property
    def is_merged(self) -> bool:
        return self.branch is None

    @property
    def label(self) -> str:
        scope = "Both branches" if self.branch is None else self.branch.capitalize()
        return f"{self.date_from:%d %b %Y} - {self.date_to:%d %b %Y} ({scope})"


def _sort_key(option: PeriodOption) -> tuple:
    return (option.date_from, option.date_to, option.branch or MERGED_BRANCH_KEY)


def resolve_review_options(
    periods_with_data: Iterable[PeriodKey],
    active_review_keys: set[PeriodKey],
    branch: str | None = None,
) -> list[PeriodOption]:
    """Timesheet-review options: periods with data and no active review.

    ``periods_with_data`` holds per-branch keys of finished, fully entered
    periods. A merged review occupies the slot for both branches.
    """
    options = set()
    for date_from, date_to, period_branch in periods_with_data:
        if branch is not None and period_branch != branch:
            continue
        if (date_from, date_to, period_branch) in active_review_keys:
            continue
        if (date_from, date_to, None) in active_review_keys:
            continue
        options.add(PeriodOption(date_from, date_to, period_branch, ReviewType.TIMESHEET_REVIEW.value))
    return sorted(options, key=_sort_key)


def resolve_final_wage_options(
    approved_reviews: Iterable[PeriodKey],
    active_final_keys: set[PeriodKey],
    branch: str | None = None,
) -> list[PeriodOption]:
    """Final-wage options from approved timesheet reviews.

    Per date range, in order of precedence:
    1. Both branches covered and no final-wage batch of any scope: one merged option.
    2. A merged final-wage batch exists: nothing.
    3. Otherwise each covered branch without its own final-wage batch.

    A review stored with no branch covers both branches. With a branch filter
    only that branch's individual option can be offered, and only when neither
    it nor a merged batch exists. No option ever double-processes hours held
    by a pending or approved final-wage batch.
    """
    coverage: dict[tuple[date, date], set[str]] = defaultdict(set)
    for date_from, date_to, review_branch in approved_reviews:
        coverage[(date_from, date_to)] |= BRANCHES if review_branch is None else {review_branch}

    final_type = ReviewType.FINAL_WAGE.value
    options = []
    for (date_from, date_to), covered in coverage.items():
        existing = {b for (df, dt, b) in active_final_keys if (df, dt) == (date_from, date_to)}

        if branch is not None:
            if branch in covered and None not in existing and branch not in existing:
                options.append(PeriodOption(date_from, date_to, branch, final_type))
            continue

        if covered >= BRANCHES and not existing:
            options.append(PeriodOption(date_from, date_to, None, final_type))
            continue
        if None in existing:
            continue
        for covered_branch in sorted(covered - existing):
            options.append(PeriodOption(date_from, date_to, covered_branch, final_type))

    return sorted(options, key=_sort_key)


class EligibilityService:
    """Gather the key sets the eligibility rules need from the store."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _approval_keys(self, review_type: str, statuses: Iterable[str]) -> set[PeriodKey]:
        result = await self.session.execute(
            select(
                PayPeriodApproval.date_from,
                PayPeriodApproval.date_to,
                PayPeriodApproval.branch,
            ).where(
                PayPeriodApproval.review_type == review_type,
                PayPeriodApproval.status.in_([ApprovalStatus(s).value for s in statuses]),
            )
        )
        return {(row.date_from, row.date_to, row.branch) for row in result.all()}

    async def _periods_with_data(self, as_of: date) -> set[PeriodKey]:
        """Finished periods per branch that have entries and none left incomplete."""
        ts = DailyTimesheetRecord
        incomplete = case(
            (and_(ts.day_type == DayType.WORKED.value, ts.time_out.is_(None)), 1),
            else_=0,
        )
        result = await self.session.execute(
            select(
                ts.entry_date,
                ts.branch,
                func.sum(incomplete).label("incomplete"),
            ).group_by(ts.entry_date, ts.branch)
        )

        seen: dict[tuple[PayPeriod, str], bool] = {}
        for row in result.all():
            key = (pay_period_for(row.entry_date), row.branch)
            seen[key] = seen.get(key, True) and not row.incomplete
        return {
            (period.date_from, period.date_to, period_branch)
            for (period, period_branch), fully_entered in seen.items()
            if fully_entered and period.is_complete(as_of)
        }

    async def get_eligible_periods(
        self,
        review_type: str,
        branch: str | None = None,
        as_of: date | None = None,
    ) -> list[PeriodOption]:
        if branch is not None and branch not in BRANCHES:
            raise ValidationError(f"Branch must be one of: {', '.join(sorted(BRANCHES))}")
        try:
            review_type = ReviewType(review_type).value
        except ValueError:
            raise ValidationError(f"Unknown review type: {review_type}")

        if review_type == ReviewType.TIMESHEET_REVIEW:
            periods = await self._periods_with_data(as_of or date.today())
            active = await self._approval_keys(review_type, ApprovalStateMachine.ACTIVE)
            return resolve_review_options(periods, active, branch)

        approved = await self._approval_keys(
            ReviewType.TIMESHEET_REVIEW.value, [ApprovalStatus.APPROVED]
        )
        active = await self._approval_keys(review_type, ApprovalStateMachine.ACTIVE)
        return resolve_final_wage_options(approved, active, branch)
