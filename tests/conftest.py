"""Pytest fixtures for branch payroll tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import AsyncGenerator
from uuid import uuid4

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from branch_payroll.config import Settings
from branch_payroll.models import (
    Base,
    DailyTimesheetRecord,
    Employee,
    PayPeriodApproval,
)

# Use in-memory SQLite for tests (with async support)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_SECRET = "admin01"

# A finished Thursday-to-Wednesday week
WEEK_START = date(2024, 1, 4)
WEEK_END = date(2024, 1, 10)
AFTER_WEEK = date(2024, 1, 11)


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def engine():
    """Create a fresh test database engine per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def settings() -> Settings:
    """Settings with a known confirmation secret."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        host="127.0.0.1",
        port=8000,
        debug=False,
        log_level="INFO",
        admin_confirmation_secret=ADMIN_SECRET,
        standard_weekly_threshold=45,
    )


@pytest.fixture
def make_employee(session: AsyncSession):
    """Factory for persisted employees."""

    async def _make(**overrides) -> Employee:
        fields = {
            "employee_id": uuid4(),
            "name": "Test Employee",
            "position": "Cashier",
            "hourly_wage": Decimal("10.00"),
            "fnpf_no": None,
            "tin_no": None,
            "bank_code": None,
            "bank_account_number": None,
            "payment_method": "cash",
            "branch": "labasa",
            "fnpf_eligible": False,
            "is_active": True,
            "weekly_normal_hours_threshold": 45,
        }
        fields.update(overrides)
        if fields["fnpf_eligible"] and fields["fnpf_no"] is None:
            fields["fnpf_no"] = f"FN{uuid4().hex[:8]}"
        employee = Employee(**fields)
        session.add(employee)
        await session.flush()
        return employee

    return _make


@pytest.fixture
def add_entry(session: AsyncSession):
    """Factory for stored daily timesheet rows, bypassing entry validation."""

    async def _add(
        employee: Employee,
        entry_date: date,
        normal_hours: str = "8",
        overtime_hours: str = "0",
        meal_allowance: str = "0",
        day_type: str = "worked",
        leave_type: str | None = None,
        time_out: str | None = "17:00",
        overtime_reason: str | None = None,
        branch: str | None = None,
    ) -> DailyTimesheetRecord:
        record = DailyTimesheetRecord(
            employee_id=employee.employee_id,
            branch=branch or employee.branch,
            entry_date=entry_date,
            day_type=day_type,
            leave_type=leave_type,
            time_in="08:00" if day_type == "worked" else None,
            lunch_in="12:00" if day_type == "worked" and time_out else None,
            lunch_out="12:30" if day_type == "worked" and time_out else None,
            time_out=time_out if day_type == "worked" else None,
            normal_hours=Decimal(normal_hours),
            overtime_hours=Decimal(overtime_hours),
            meal_allowance=Decimal(meal_allowance),
            overtime_reason=overtime_reason,
        )
        session.add(record)
        await session.flush()
        return record

    return _add


@pytest.fixture
def add_batch(session: AsyncSession):
    """Factory for stored approval batches with no wage records."""

    async def _add(
        review_type: str = "timesheet_review",
        branch: str | None = "labasa",
        status: str = "approved",
        date_from: date = WEEK_START,
        date_to: date = WEEK_END,
    ) -> PayPeriodApproval:
        batch = PayPeriodApproval(
            date_from=date_from,
            date_to=date_to,
            branch=branch,
            status=status,
            review_type=review_type,
            initiated_by="tester",
            token=uuid4().hex,
        )
        session.add(batch)
        await session.flush()
        return batch

    return _add
