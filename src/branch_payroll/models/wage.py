"""Computed wage records owned by a final-wage approval batch."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from branch_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from branch_payroll.models.approval import PayPeriodApproval
    from branch_payroll.models.employee import Employee


class WageRecord(Base, TimestampMixin):
    """Wage computed for one employee over one pay period.

    employee_name and hourly_wage are snapshots taken at computation time.
    """

    __tablename__ = "wage_record"

    wage_record_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    approval_id: Mapped[UUID] = mapped_column(
        ForeignKey("pay_period_approval.approval_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="RESTRICT"),
        nullable=False,
    )
    employee_name: Mapped[str] = mapped_column(String(255), nullable=False)
    hourly_wage: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    hours_worked: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    meal_allowance: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    other_deductions: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    gross_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    fnpf_deduction: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    net_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    date_from: Mapped[date] = mapped_column(Date, nullable=False)
    date_to: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        UniqueConstraint("approval_id", "employee_id", name="wage_record_approval_employee_unique"),
        CheckConstraint("net_pay >= 0", name="wage_record_net_pay_check"),
        CheckConstraint(
            "hours_worked >= 0 AND overtime_hours >= 0 AND meal_allowance >= 0 "
            "AND other_deductions >= 0 AND fnpf_deduction >= 0",
            name="wage_record_non_negative_check",
        ),
        CheckConstraint("date_to >= date_from", name="wage_record_dates_check"),
    )

    # Relationships
    approval: Mapped[PayPeriodApproval] = relationship(back_populates="wage_records")
    employee: Mapped[Employee] = relationship(back_populates="wage_records")

    @property
    def approval_status(self) -> str:
        """Status of the owning batch."""
        return self.approval.status
