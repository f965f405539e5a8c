from __future__ import annotations

import math
from datetime import timedelta
from typing import Optional

from ..common.datetime_utils import Instant, parse_iso_datetime
from ..jobs.model import Job, Shift
from ..scheduling.resolver import resolve_windows


def early_clock_in_allowance(job: Job) -> int:
    """Minutes before shift start during which clock-in is allowed."""
    return max(int(job.config.early_clock_in_minutes or 0), 0)


def can_clock_in(job: Job, applicant_id: str, instant: Instant, shift: Optional[Shift] = None) -> bool:
    """True iff ``instant`` is inside ``[start - allowance, end]`` of today's
    window or of yesterday's still-running overnight window."""
    now = parse_iso_datetime(instant, job.tz)
    allowance = early_clock_in_allowance(job)
    windows = resolve_windows(job, applicant_id, now, shift)
    return any(w.contains(now, early_minutes=allowance) for w in windows)


def minutes_until_eligible(
    job: Job,
    applicant_id: str,
    instant: Instant,
    shift: Optional[Shift] = None,
) -> Optional[int]:
    now = parse_iso_datetime(instant, job.tz)
    allowance = timedelta(minutes=early_clock_in_allowance(job))

    best = None
    for window in resolve_windows(job, applicant_id, now, shift):
        seconds = (window.start - allowance - now).total_seconds()
        minutes = max(0, math.ceil(seconds / 60))
        if best is None or minutes < best:
            best = minutes
    return best
