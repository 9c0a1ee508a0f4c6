"""Daily timesheet records."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from branch_payroll.models.base import Base, UpdatedAtMixin

if TYPE_CHECKING:
    from branch_payroll.models.employee import Employee


LEGACY_LEAVE_PREFIX = "Approved: "


class DayType(str, Enum):
    """What kind of day a timesheet entry records."""

    WORKED = "worked"
    ABSENT = "absent"
    LEAVE = "leave"

    @classmethod
    def from_legacy(
        cls,
        is_present: bool,
        is_absent: bool,
        overtime_reason: str | None,
    ) -> tuple[DayType | None, str | None]:
        """Map the old present/absent flags and 'Approved: <type>' marker.

        Returns (day_type, leave_type). day_type is None for an unset entry.
        """
        if overtime_reason and overtime_reason.startswith(LEGACY_LEAVE_PREFIX):
            leave_type = overtime_reason[len(LEGACY_LEAVE_PREFIX):].strip() or LeaveType.OTHER.value
            return cls.LEAVE, leave_type
        if is_present:
            return cls.WORKED, None
        if is_absent:
            return cls.ABSENT, None
        return None, None


class LeaveType(str, Enum):
    """Approved leave categories."""

    ANNUAL = "annual"
    SICK = "sick"
    BEREAVEMENT = "bereavement"
    MATERNITY_PATERNITY = "maternity_paternity"
    UNPAID = "unpaid"
    OTHER = "other"


class DailyTimesheetRecord(Base, UpdatedAtMixin):
    """One attendance/hours record per employee per calendar day."""

    __tablename__ = "daily_timesheet"

    entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="RESTRICT"),
        nullable=False,
    )
    branch: Mapped[str] = mapped_column(String(10), nullable=False)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    day_type: Mapped[str] = mapped_column(String(10), nullable=False)
    leave_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    time_in: Mapped[str | None] = mapped_column(String(5), nullable=True)
    lunch_in: Mapped[str | None] = mapped_column(String(5), nullable=True)
    lunch_out: Mapped[str | None] = mapped_column(String(5), nullable=True)
    time_out: Mapped[str | None] = mapped_column(String(5), nullable=True)
    normal_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False, default=Decimal("0"))
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False, default=Decimal("0"))
    meal_allowance: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    overtime_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("employee_id", "entry_date", name="daily_timesheet_employee_date_unique"),
        CheckConstraint("branch IN ('labasa', 'suva')", name="daily_timesheet_branch_check"),
        CheckConstraint(
            "day_type IN ('worked', 'absent', 'leave')",
            name="daily_timesheet_day_type_check",
        ),
        CheckConstraint(
            "(day_type = 'leave') = (leave_type IS NOT NULL)",
            name="daily_timesheet_leave_type_check",
        ),
        CheckConstraint(
            "normal_hours >= 0 AND overtime_hours >= 0 AND meal_allowance >= 0",
            name="daily_timesheet_non_negative_check",
        ),
        Index("ix_daily_timesheet_branch_date", "branch", "entry_date"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="timesheet_entries")

    @property
    def is_present(self) -> bool:
        return self.day_type == DayType.WORKED

    @property
    def is_absent(self) -> bool:
        return self.day_type == DayType.ABSENT

    @property
    def is_leave(self) -> bool:
        return self.day_type == DayType.LEAVE

    @property
    def is_complete(self) -> bool:
        """Worked days are complete once time out is recorded."""
        if self.day_type != DayType.WORKED:
            return True
        return self.time_out is not None
