"""Administrative confirmation gate for mutating operations.

The secret is a workflow confirmation step, not access control.
"""

from __future__ import annotations

import logging
import secrets

from branch_payroll.config import Settings
from branch_payroll.errors import ConfirmationError

logger = logging.getLogger(__name__)


def verify_confirmation(supplied: str | None, settings: Settings, action: str) -> None:
    """Raise ConfirmationError unless ``supplied`` matches the configured secret."""
    if not supplied:
        logger.warning("Rejected %s: admin confirmation missing", action)
        raise ConfirmationError("Admin confirmation is required")
    if not secrets.compare_digest(supplied.encode(), settings.admin_confirmation_secret.encode()):
        logger.warning("Rejected %s: admin confirmation did not match", action)
        raise ConfirmationError()
