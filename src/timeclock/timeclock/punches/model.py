from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Punch:
    """A clock-in record; ``time_out is None`` means the punch is still open."""

    punch_id: str
    applicant_id: str
    job_id: str
    time_in: datetime
    time_out: Optional[datetime] = None
    shift_slug: Optional[str] = None
    user_note: Optional[str] = None
    flagged_abandoned: bool = False

    @property
    def is_open(self) -> bool:
        return self.time_out is None
