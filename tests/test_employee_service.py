"""Tests for the employee registry."""

from decimal import Decimal
from uuid import uuid4

import pytest

from branch_payroll.errors import ConfirmationError, DuplicateError, NotFoundError, ValidationError
from branch_payroll.services.employee_service import EmployeeService
from tests.conftest import ADMIN_SECRET


def employee_data(**overrides) -> dict:
    data = {
        "name": "Mere Tuilagi",
        "position": "Sales Assistant",
        "hourly_wage": "4.50",
        "branch": "suva",
        "payment_method": "online",
        "bank_code": "BSP",
        "bank_account_number": "1234567",
        "fnpf_eligible": True,
        "fnpf_no": "FN1001",
        "tin_no": "TIN1001",
    }
    data.update(overrides)
    return data


class TestCreateEmployee:
    """Test employee creation and validation."""

    async def test_create(self, session, settings):
        employee = await EmployeeService(session, settings).create_employee(employee_data(), ADMIN_SECRET)

        assert employee.employee_id is not None
        assert employee.hourly_wage == Decimal("4.50")
        assert employee.is_active is True
        assert employee.weekly_normal_hours_threshold == 45
        assert employee.pays_online

    async def test_special_employee_gets_48_hour_threshold(self, session, settings):
        employee = await EmployeeService(session, settings).create_employee(
            employee_data(name="Bimlesh Shashi Prakash"), ADMIN_SECRET
        )

        assert employee.weekly_normal_hours_threshold == 48

    async def test_explicit_threshold_kept(self, session, settings):
        employee = await EmployeeService(session, settings).create_employee(
            employee_data(weekly_normal_hours_threshold=40), ADMIN_SECRET
        )

        assert employee.weekly_normal_hours_threshold == 40

    async def test_cash_employee_drops_bank_details(self, session, settings):
        employee = await EmployeeService(session, settings).create_employee(
            employee_data(payment_method="cash"), ADMIN_SECRET
        )

        assert employee.bank_code is None
        assert employee.bank_account_number is None

    async def test_not_eligible_drops_fnpf_number(self, session, settings):
        employee = await EmployeeService(session, settings).create_employee(
            employee_data(fnpf_eligible=False), ADMIN_SECRET
        )

        assert employee.fnpf_no is None

    async def test_all_errors_reported(self, session, settings):
        data = employee_data(
            name="",
            hourly_wage="-1",
            branch="nadi",
            bank_code=None,
            fnpf_no=None,
        )

        with pytest.raises(ValidationError) as exc_info:
            await EmployeeService(session, settings).create_employee(data, ADMIN_SECRET)

        errors = exc_info.value.errors
        assert "Name is required" in errors
        assert "Hourly wage must not be negative" in errors
        assert "Bank code is required for online payment" in errors
        assert "FNPF number is required for FNPF-eligible employees" in errors
        assert any(e.startswith("Branch must be one of") for e in errors)

    async def test_online_requires_known_bank(self, session, settings):
        with pytest.raises(ValidationError):
            await EmployeeService(session, settings).create_employee(
                employee_data(bank_code="XYZ"), ADMIN_SECRET
            )

    async def test_duplicate_fnpf_number(self, session, settings):
        service = EmployeeService(session, settings)
        await service.create_employee(employee_data(), ADMIN_SECRET)

        with pytest.raises(DuplicateError) as exc_info:
            await service.create_employee(employee_data(name="Other", tin_no="TIN2"), ADMIN_SECRET)

        assert exc_info.value.field == "fnpf_no"

    async def test_duplicate_tin_number(self, session, settings):
        service = EmployeeService(session, settings)
        await service.create_employee(employee_data(), ADMIN_SECRET)

        with pytest.raises(DuplicateError) as exc_info:
            await service.create_employee(employee_data(name="Other", fnpf_no="FN2"), ADMIN_SECRET)

        assert exc_info.value.field == "tin_no"

    async def test_wrong_confirmation_creates_nothing(self, session, settings):
        service = EmployeeService(session, settings)

        with pytest.raises(ConfirmationError):
            await service.create_employee(employee_data(), "admin02")
        with pytest.raises(ConfirmationError):
            await service.create_employee(employee_data(), None)

        assert await service.list_employees(include_inactive=True) == []


class TestUpdateEmployee:
    """Test updates and deactivation."""

    async def test_update_keeps_threshold(self, session, settings):
        service = EmployeeService(session, settings)
        employee = await service.create_employee(
            employee_data(name="Bimlesh Shashi Prakash"), ADMIN_SECRET
        )

        updated = await service.update_employee(
            employee.employee_id, employee_data(name="Bimlesh Shashi Prakash", hourly_wage="5.00"), ADMIN_SECRET
        )

        assert updated.hourly_wage == Decimal("5.00")
        assert updated.weekly_normal_hours_threshold == 48

    async def test_update_own_numbers_not_duplicate(self, session, settings):
        service = EmployeeService(session, settings)
        employee = await service.create_employee(employee_data(), ADMIN_SECRET)

        updated = await service.update_employee(
            employee.employee_id, employee_data(position="Supervisor"), ADMIN_SECRET
        )

        assert updated.position == "Supervisor"

    async def test_update_unknown_employee(self, session, settings):
        with pytest.raises(NotFoundError):
            await EmployeeService(session, settings).update_employee(uuid4(), employee_data(), ADMIN_SECRET)

    async def test_deactivate_hides_from_default_list(self, session, settings):
        service = EmployeeService(session, settings)
        employee = await service.create_employee(employee_data(), ADMIN_SECRET)

        await service.deactivate_employee(employee.employee_id, ADMIN_SECRET)

        assert await service.list_employees() == []
        (inactive,) = await service.list_employees(include_inactive=True)
        assert inactive.is_active is False

    async def test_reactivate(self, session, settings):
        service = EmployeeService(session, settings)
        employee = await service.create_employee(employee_data(), ADMIN_SECRET)
        await service.deactivate_employee(employee.employee_id, ADMIN_SECRET)

        updated = await service.update_employee(
            employee.employee_id, employee_data(is_active=True), ADMIN_SECRET
        )

        assert updated.is_active is True
