"""Punch overlap detection.

Ranges are half-open. An open punch runs from ``time_in`` to "now", so two
open punches of the same applicant always conflict while back-to-back punches
(``a.time_out == b.time_in``) never do.

Punches longer than ``max_punch_hours`` are treated as data-entry errors and
left out of the interval comparison. That is a heuristic to keep one bad
record from blocking every later punch; it is not needed for correctness and
never hides an open-vs-open conflict.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from ..common.datetime_utils import now_utc, to_utc
from ..core.constants import DEFAULT_MAX_PUNCH_HOURS
from .model import Punch
from .repository import PunchRepository

logger = logging.getLogger(__name__)


def effective_end(start: datetime, end: Optional[datetime], now: datetime) -> datetime:
    if end is not None:
        return end
    return max(now, start)


def ranges_overlap(
    a_start: datetime,
    a_end: Optional[datetime],
    b_start: datetime,
    b_end: Optional[datetime],
    *,
    now: datetime,
) -> bool:
    if a_end is None and b_end is None:
        return True
    a_stop = effective_end(a_start, a_end, now)
    b_stop = effective_end(b_start, b_end, now)
    return max(a_start, b_start) < min(a_stop, b_stop)


def is_implausible(start: datetime, end: Optional[datetime], *, now: datetime, max_duration: timedelta) -> bool:
    return effective_end(start, end, now) - start > max_duration


def find_overlapping(
    start: datetime,
    end: Optional[datetime],
    existing: Iterable[Punch],
    *,
    now: datetime,
    exclude_punch_id: Optional[str] = None,
    max_punch_hours: float = DEFAULT_MAX_PUNCH_HOURS,
) -> List[Punch]:
    """Existing punches that conflict with the candidate ``[start, end)``."""
    start = to_utc(start)
    end = to_utc(end) if end is not None else None
    now = to_utc(now)
    if end is not None and end < start:
        end = start
    max_duration = timedelta(hours=max_punch_hours)

    if is_implausible(start, end, now=now, max_duration=max_duration):
        logger.warning("Candidate punch %s -> %s exceeds %sh", start, end or "open", max_punch_hours)

    conflicts = []
    for punch in existing:
        if exclude_punch_id is not None and punch.punch_id == exclude_punch_id:
            continue
        if end is None and punch.time_out is None:
            conflicts.append(punch)
            continue
        time_in = to_utc(punch.time_in)
        time_out = to_utc(punch.time_out) if punch.time_out is not None else None
        if is_implausible(time_in, time_out, now=now, max_duration=max_duration):
            logger.warning(
                "Ignoring punch %s of applicant %s in overlap check: longer than %sh",
                punch.punch_id,
                punch.applicant_id,
                max_punch_hours,
            )
            continue
        if ranges_overlap(start, end, time_in, time_out, now=now):
            conflicts.append(punch)
    return conflicts


class PunchOverlapDetector:
    def __init__(
        self,
        punches: PunchRepository,
        *,
        max_punch_hours: float = DEFAULT_MAX_PUNCH_HOURS,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._punches = punches
        self._max_punch_hours = float(max_punch_hours)
        self._clock = clock

    def find_conflicts(
        self,
        applicant_id: str,
        start: datetime,
        end: Optional[datetime] = None,
        exclude_punch_id: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> List[Punch]:
        now = now or self._clock()
        candidates = self._punches.list_overlap_candidates(
            applicant_id=applicant_id,
            start=start,
            until=effective_end(start, end, now),
            exclude_punch_id=exclude_punch_id,
        )
        return find_overlapping(
            start,
            end,
            candidates,
            now=now,
            exclude_punch_id=exclude_punch_id,
            max_punch_hours=self._max_punch_hours,
        )

    def has_overlap(
        self,
        applicant_id: str,
        start: datetime,
        end: Optional[datetime] = None,
        exclude_punch_id: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> bool:
        return bool(self.find_conflicts(applicant_id, start, end, exclude_punch_id, now=now))
