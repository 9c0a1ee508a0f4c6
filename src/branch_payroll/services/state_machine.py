"""Approval batch state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from branch_payroll.errors import StateConflictError


class ApprovalStatus(str, Enum):
    """Approval batch status values."""

    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class ReviewType(str, Enum):
    """What an approval batch covers."""

    TIMESHEET_REVIEW = "timesheet_review"
    FINAL_WAGE = "final_wage"


class InvalidTransitionError(StateConflictError):
    """Raised when an invalid state transition is attempted."""

    def __init__(
        self,
        from_status: str,
        to_status: str,
        reason: str | None = None,
        approval_id=None,
    ):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, approval_id=approval_id)


class ApprovalStateMachine:
    """State machine for approval batch status transitions.

    Allowed transitions:
    - pending → approved
    - pending → declined
    - declined → pending (resubmit, new token)
    - approved → pending (records edited)
    - pending → pending (records edited while pending)
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        ApprovalStatus.PENDING: [
            ApprovalStatus.APPROVED,
            ApprovalStatus.DECLINED,
            ApprovalStatus.PENDING,
        ],
        ApprovalStatus.DECLINED: [ApprovalStatus.PENDING],
        ApprovalStatus.APPROVED: [ApprovalStatus.PENDING],
    }

    # Statuses that occupy a (period, branch, review type) slot
    ACTIVE = {ApprovalStatus.PENDING, ApprovalStatus.APPROVED}

    # Statuses a reviewer may set through the approval link
    DECISIONS = {ApprovalStatus.APPROVED, ApprovalStatus.DECLINED}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str, approval_id=None) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status, approval_id=approval_id)

    @classmethod
    def is_active(cls, status: str) -> bool:
        """Check if a batch in this status blocks a new submission for its key."""
        return status in cls.ACTIVE

    @classmethod
    def is_decision(cls, status: str) -> bool:
        return status in cls.DECISIONS

    @classmethod
    def is_resubmission(cls, from_status: str, to_status: str) -> bool:
        """Check if this transition is a resubmission (declined → pending)."""
        return from_status == ApprovalStatus.DECLINED and to_status == ApprovalStatus.PENDING

    @classmethod
    def is_edit_reset(cls, from_status: str, to_status: str) -> bool:
        """Check if this transition is the reset that follows an edit."""
        return from_status in cls.ACTIVE and to_status == ApprovalStatus.PENDING

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])
