"""API test fixtures: the app wired to the per-test SQLite session."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from branch_payroll.api.app import create_app
from branch_payroll.api.dependencies import get_app_settings, get_db_session
from tests.conftest import ADMIN_SECRET

ADMIN_HEADERS = {"X-Admin-Confirmation": ADMIN_SECRET}


@pytest.fixture
async def client(session, settings) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests share the test session."""
    app = create_app()

    async def override_session():
        yield session

    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_app_settings] = lambda: settings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
