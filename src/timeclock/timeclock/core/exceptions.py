from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a job or punch referenced by ID does not exist."""


class ClockInNotAllowedError(DomainError):
    """Raised when a clock-in falls outside every applicable shift window."""

    def __init__(self, message: str, *, minutes_until_eligible: Optional[int] = None):
        super().__init__(message)
        self.minutes_until_eligible = minutes_until_eligible


class PunchConflictError(DomainError):
    """Raised when a punch would overlap another punch of the same applicant."""


class InvalidTransitionError(DomainError):
    """Raised when a punch state change is not allowed."""
