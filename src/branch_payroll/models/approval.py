"""Approval batches for timesheet reviews and final wages."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, DateTime, Index, String, func, literal_column
from sqlalchemy.orm import Mapped, mapped_column, relationship

from branch_payroll.models.base import Base, UpdatedAtMixin

if TYPE_CHECKING:
    from branch_payroll.models.wage import WageRecord


MERGED_BRANCH_KEY = "all"


class PayPeriodApproval(Base, UpdatedAtMixin):
    """A tokenized batch sharing one pending/approved/declined lifecycle.

    branch is NULL for a batch merged across both branches.
    """

    __tablename__ = "pay_period_approval"

    approval_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    date_from: Mapped[date] = mapped_column(Date, nullable=False)
    date_to: Mapped[date] = mapped_column(Date, nullable=False)
    branch: Mapped[str | None] = mapped_column(String(10), nullable=True)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default="pending")
    review_type: Mapped[str] = mapped_column(String(20), nullable=False)
    initiated_by: Mapped[str] = mapped_column(String(100), nullable=False)
    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    decided_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'declined')",
            name="pay_period_approval_status_check",
        ),
        CheckConstraint(
            "review_type IN ('timesheet_review', 'final_wage')",
            name="pay_period_approval_review_type_check",
        ),
        CheckConstraint(
            "branch IS NULL OR branch IN ('labasa', 'suva')",
            name="pay_period_approval_branch_check",
        ),
        CheckConstraint("date_to >= date_from", name="pay_period_approval_dates_check"),
    )

    # Relationships
    wage_records: Mapped[list[WageRecord]] = relationship(
        back_populates="approval",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def branch_key(self) -> str:
        return self.branch or MERGED_BRANCH_KEY

    @property
    def is_merged(self) -> bool:
        return self.branch is None


# At most one non-declined batch per (period, branch, review type).
# NULL branch is folded into a literal so merged batches collide with each other.
Index(
    "uq_pay_period_approval_active_key",
    PayPeriodApproval.date_from,
    PayPeriodApproval.date_to,
    func.coalesce(PayPeriodApproval.branch, literal_column(f"'{MERGED_BRANCH_KEY}'")),
    PayPeriodApproval.review_type,
    unique=True,
    postgresql_where=PayPeriodApproval.status != literal_column("'declined'"),
    sqlite_where=PayPeriodApproval.status != literal_column("'declined'"),
)
