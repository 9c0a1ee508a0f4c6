"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from branch_payroll.config import Settings, get_settings
from branch_payroll.database import get_session


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session, committed on success and rolled back on error."""
    async with get_session() as session:
        yield session


def get_app_settings() -> Settings:
    """Settings dependency, overridable in tests."""
    return get_settings()


async def get_admin_confirmation(
    x_admin_confirmation: Annotated[str | None, Header()] = None,
) -> str | None:
    """Admin confirmation secret from the X-Admin-Confirmation header.

    Checked by the service layer so a mismatch is rejected before any write.
    """
    return x_admin_confirmation


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
AdminConfirmation = Annotated[str | None, Depends(get_admin_confirmation)]
