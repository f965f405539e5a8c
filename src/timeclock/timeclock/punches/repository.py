from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Punch


class PunchRepository(Protocol):
    def get_by_id(self, punch_id: str) -> Optional[Punch]:
        raise NotImplementedError

    def find_open_for_applicant(self, applicant_id: str) -> Optional[Punch]:
        raise NotImplementedError

    def list_open_for_job(self, job_id: str) -> Sequence[Punch]:
        raise NotImplementedError

    def list_overlap_candidates(
        self,
        *,
        applicant_id: str,
        start: datetime,
        until: datetime,
        exclude_punch_id: Optional[str] = None,
    ) -> Sequence[Punch]:
        """Every open punch plus closed punches with ``time_out > start`` and
        ``time_in < until`` for the applicant.

        The filter is the interval intersection test itself, so it never
        drops a punch that could overlap ``[start, until)``.
        """

        raise NotImplementedError

    def create_open(
        self,
        *,
        applicant_id: str,
        job_id: str,
        time_in: datetime,
        shift_slug: Optional[str] = None,
        user_note: Optional[str] = None,
    ) -> Punch:
        """Insert an open punch.

        Raises PunchConflictError when the applicant already has one open.
        """

        raise NotImplementedError

    def close(self, *, punch_id: str, time_out: datetime) -> bool:
        raise NotImplementedError

    def update_times(self, *, punch_id: str, time_in: datetime, time_out: Optional[datetime]) -> bool:
        raise NotImplementedError

    def flag_abandoned(self, *, punch_id: str) -> bool:
        raise NotImplementedError
