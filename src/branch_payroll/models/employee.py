"""Employee master data."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from branch_payroll.calculators.wage_calculator import SPECIAL_WEEKLY_THRESHOLD, STANDARD_WEEKLY_THRESHOLD
from branch_payroll.models.base import Base, UpdatedAtMixin

if TYPE_CHECKING:
    from branch_payroll.models.timesheet import DailyTimesheetRecord
    from branch_payroll.models.wage import WageRecord


class Branch(str, Enum):
    """Business branches."""

    LABASA = "labasa"
    SUVA = "suva"


class PaymentMethod(str, Enum):
    """How net pay reaches the employee."""

    CASH = "cash"
    ONLINE = "online"


class BankCode(str, Enum):
    """Banks accepted for online payment."""

    ANZ = "ANZ"
    BSP = "BSP"
    BOB = "BOB"
    HFC = "HFC"
    BRED = "BRED"


# Employees who were on a longer normal week before the threshold became a field.
SPECIAL_THRESHOLD_EMPLOYEES = frozenset({"Bimlesh Shashi Prakash"})


class Employee(Base, UpdatedAtMixin):
    """Employee record. Never deleted, only deactivated."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[str] = mapped_column(String(100), nullable=False)
    hourly_wage: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    fnpf_no: Mapped[str | None] = mapped_column(String(50), nullable=True, unique=True)
    tin_no: Mapped[str | None] = mapped_column(String(50), nullable=True, unique=True)
    bank_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    bank_account_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    payment_method: Mapped[str] = mapped_column(String(10), nullable=False)
    branch: Mapped[str] = mapped_column(String(10), nullable=False)
    fnpf_eligible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    weekly_normal_hours_threshold: Mapped[int] = mapped_column(
        Integer, nullable=False, default=STANDARD_WEEKLY_THRESHOLD
    )

    __table_args__ = (
        CheckConstraint("hourly_wage >= 0", name="employee_hourly_wage_check"),
        CheckConstraint(
            "payment_method IN ('cash', 'online')",
            name="employee_payment_method_check",
        ),
        CheckConstraint("branch IN ('labasa', 'suva')", name="employee_branch_check"),
        CheckConstraint(
            "bank_code IS NULL OR bank_code IN ('ANZ', 'BSP', 'BOB', 'HFC', 'BRED')",
            name="employee_bank_code_check",
        ),
        CheckConstraint(
            "payment_method <> 'online' OR "
            "(bank_code IS NOT NULL AND bank_account_number IS NOT NULL)",
            name="employee_online_bank_details_check",
        ),
        CheckConstraint(
            "NOT fnpf_eligible OR fnpf_no IS NOT NULL",
            name="employee_fnpf_no_check",
        ),
        CheckConstraint(
            "weekly_normal_hours_threshold > 0",
            name="employee_weekly_threshold_check",
        ),
    )

    # Relationships
    timesheet_entries: Mapped[list[DailyTimesheetRecord]] = relationship(
        back_populates="employee"
    )
    wage_records: Mapped[list[WageRecord]] = relationship(back_populates="employee")

    @staticmethod
    def default_threshold_for(name: str, standard: int = STANDARD_WEEKLY_THRESHOLD) -> int:
        """Weekly normal-hours threshold a new employee starts with."""
        if name.strip() in SPECIAL_THRESHOLD_EMPLOYEES:
            return SPECIAL_WEEKLY_THRESHOLD
        return standard

    @property
    def pays_online(self) -> bool:
        return self.payment_method == PaymentMethod.ONLINE
