"""Employee registry: master data behind every wage computation."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from branch_payroll.calculators.types import round_to_cents, to_decimal
from branch_payroll.config import Settings, get_settings
from branch_payroll.errors import DuplicateError, NotFoundError, ValidationError
from branch_payroll.models import BankCode, Branch, Employee, PaymentMethod
from branch_payroll.services.confirmation import verify_confirmation

logger = logging.getLogger(__name__)

_BRANCHES = {b.value for b in Branch}
_PAYMENT_METHODS = {p.value for p in PaymentMethod}
_BANK_CODES = {b.value for b in BankCode}


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class EmployeeService:
    """Create, update, and deactivate employees.

    Employees are never deleted; historical wage records reference them.
    """

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()

    async def list_employees(self, include_inactive: bool = False) -> list[Employee]:
        stmt = select(Employee).order_by(Employee.name)
        if not include_inactive:
            stmt = stmt.where(Employee.is_active.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_employee(self, employee_id: UUID) -> Employee:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    def _validate(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Check and normalize employee fields, collecting every failure.

        Bank details are dropped for cash employees and the FNPF number for
        non-eligible employees.
        """
        errors: list[str] = []

        name = _clean(data.get("name"))
        position = _clean(data.get("position"))
        if name is None:
            errors.append("Name is required")
        if position is None:
            errors.append("Position is required")

        hourly_wage = None
        try:
            hourly_wage = to_decimal(data.get("hourly_wage"), default=None)
        except ValueError:
            errors.append("Hourly wage must be a number")
        else:
            if hourly_wage is None:
                errors.append("Hourly wage is required")
            elif hourly_wage < 0:
                errors.append("Hourly wage must not be negative")

        branch = _clean(data.get("branch"))
        if branch not in _BRANCHES:
            errors.append(f"Branch must be one of: {', '.join(sorted(_BRANCHES))}")

        payment_method = _clean(data.get("payment_method"))
        if payment_method not in _PAYMENT_METHODS:
            errors.append(f"Payment method must be one of: {', '.join(sorted(_PAYMENT_METHODS))}")

        fnpf_eligible = bool(data.get("fnpf_eligible", False))
        fnpf_no = _clean(data.get("fnpf_no")) if fnpf_eligible else None
        if fnpf_eligible and fnpf_no is None:
            errors.append("FNPF number is required for FNPF-eligible employees")

        bank_code = bank_account_number = None
        if payment_method == PaymentMethod.ONLINE:
            bank_code = _clean(data.get("bank_code"))
            bank_account_number = _clean(data.get("bank_account_number"))
            if bank_code is None:
                errors.append("Bank code is required for online payment")
            elif bank_code not in _BANK_CODES:
                errors.append(f"Bank code must be one of: {', '.join(sorted(_BANK_CODES))}")
            if bank_account_number is None:
                errors.append("Bank account number is required for online payment")

        threshold = data.get("weekly_normal_hours_threshold")
        if threshold is None and name is not None:
            threshold = Employee.default_threshold_for(
                name, self.settings.standard_weekly_threshold
            )
        if threshold is not None:
            try:
                threshold = int(threshold)
            except (TypeError, ValueError):
                errors.append("Weekly normal hours threshold must be a whole number")
            else:
                if threshold <= 0:
                    errors.append("Weekly normal hours threshold must be positive")

        if errors:
            raise ValidationError(errors)

        return {
            "name": name,
            "position": position,
            "hourly_wage": round_to_cents(hourly_wage),
            "fnpf_no": fnpf_no,
            "tin_no": _clean(data.get("tin_no")),
            "bank_code": bank_code,
            "bank_account_number": bank_account_number,
            "payment_method": payment_method,
            "branch": branch,
            "fnpf_eligible": fnpf_eligible,
            "weekly_normal_hours_threshold": threshold,
        }

    async def _check_unique(self, fields: dict[str, Any], exclude: UUID | None = None) -> None:
        for column, label in ((Employee.fnpf_no, "FNPF number"), (Employee.tin_no, "TIN number")):
            value = fields[column.key]
            if value is None:
                continue
            stmt = select(Employee.employee_id).where(column == value)
            if exclude is not None:
                stmt = stmt.where(Employee.employee_id != exclude)
            existing = (await self.session.execute(stmt)).scalar_one_or_none()
            if existing is not None:
                logger.warning("Rejected employee write: duplicate %s", column.key)
                raise DuplicateError(f"{label} {value} is already assigned to another employee", field=column.key)

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateError(f"Employee violates a uniqueness rule: {exc.orig}") from exc

    async def create_employee(self, data: Mapping[str, Any], confirmation: str | None) -> Employee:
        verify_confirmation(confirmation, self.settings, "employee create")
        fields = self._validate(data)
        await self._check_unique(fields)

        employee = Employee(is_active=True, **fields)
        self.session.add(employee)
        await self._flush()
        logger.info("Created employee %s (%s)", employee.employee_id, employee.branch)
        return employee

    async def update_employee(
        self, employee_id: UUID, data: Mapping[str, Any], confirmation: str | None
    ) -> Employee:
        verify_confirmation(confirmation, self.settings, "employee update")
        employee = await self.get_employee(employee_id)
        if data.get("weekly_normal_hours_threshold") is None:
            data = {**data, "weekly_normal_hours_threshold": employee.weekly_normal_hours_threshold}
        fields = self._validate(data)
        await self._check_unique(fields, exclude=employee_id)

        for key, value in fields.items():
            setattr(employee, key, value)
        if "is_active" in data:
            employee.is_active = bool(data["is_active"])
        await self._flush()
        logger.info("Updated employee %s", employee_id)
        return employee

    async def deactivate_employee(self, employee_id: UUID, confirmation: str | None) -> Employee:
        verify_confirmation(confirmation, self.settings, "employee deactivate")
        employee = await self.get_employee(employee_id)
        employee.is_active = False
        await self._flush()
        logger.info("Deactivated employee %s", employee_id)
        return employee
