from __future__ import annotations

from enum import Enum


class RosterEntryStatus(str, Enum):
    """Workflow status of a roster entry (shift requests)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_active(self) -> bool:
        return self == RosterEntryStatus.APPROVED


class PunchState(str, Enum):
    """Lifecycle of a punch."""

    OPEN = "OPEN"
    ABANDONED_FLAGGED = "ABANDONED_FLAGGED"
    CLOSED = "CLOSED"


class PunchAction(str, Enum):
    CLOCK_OUT = "clockOut"
    UPDATE = "update"
