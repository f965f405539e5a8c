from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import Instant, local_date, parse_iso_datetime, to_utc, weekday_name
from ..core.enums import PunchState
from ..core.exceptions import InvalidTransitionError
from ..jobs.model import Job, Shift
from ..punches.model import Punch
from ..scheduling.projection import is_overnight, project_to_day
from ..scheduling.resolver import resolve_shift_window
from .eligibility import early_clock_in_allowance

_TRANSITIONS = {
    PunchState.OPEN: {PunchState.CLOSED, PunchState.ABANDONED_FLAGGED},
    PunchState.ABANDONED_FLAGGED: {PunchState.CLOSED},
    PunchState.CLOSED: set(),
}


def calculate_time_in(job: Job, applicant_id: str, instant: Instant, shift: Optional[Shift] = None) -> datetime:
    """Effective recorded time-in.

    Early clock-ins inside ``[start - allowance, start]`` are snapped to the
    shift start when the job auto-adjusts them; everything else keeps the
    actual instant.
    """
    now = parse_iso_datetime(instant, job.tz)
    window = resolve_shift_window(job, applicant_id, now, shift)
    if window is None or not job.config.auto_adjust_early_clock_in:
        return now

    earliest = window.start - timedelta(minutes=early_clock_in_allowance(job))
    if earliest <= now <= window.start:
        return window.start
    return now


def shift_day_ends(job: Job, day: date, *, overnight_only: bool = False) -> list:
    """Projected end of every shift scheduled on ``day`` (overnight aware)."""
    tz = job.tz
    ends = []
    for shift in job.shifts:
        entry = shift.schedule_for(weekday_name(day))
        if entry is None or entry.end is None:
            continue
        if overnight_only and (entry.start is None or not is_overnight(entry.start, entry.end, tz)):
            continue
        ends.append(to_utc(project_to_day(entry.end, day, overnight_anchor=entry.start, tz=tz)))
    return ends


def governing_shift_ends(job: Job, punch: Punch) -> list:
    tz = job.tz
    punch_day = local_date(punch.time_in, tz)
    ends = shift_day_ends(job, punch_day)
    # A punch opened after midnight may belong to yesterday's overnight shift.
    ends += [
        end
        for end in shift_day_ends(job, punch_day - timedelta(days=1), overnight_only=True)
        if punch.time_in <= end
    ]
    return ends


def auto_clockout_time(job: Job, punch: Punch) -> datetime:
    """Time-out used when an abandoned punch is closed at shift end."""
    ends = governing_shift_ends(job, punch)
    if not ends:
        return punch.time_in
    return max(max(ends), punch.time_in)


def has_abandoned_punch(job: Job, punch: Punch, instant: Instant) -> bool:
    """Open punch whose governing shift day has already ended.

    Every shift of the job scheduled on the punch's weekday is considered; if
    any of them still ends after ``instant`` the punch is not abandoned. With
    no shift scheduled that day no end remains in the future, so the punch is
    abandoned.
    """
    if not punch.is_open:
        return False

    now = parse_iso_datetime(instant, job.tz)
    ends = governing_shift_ends(job, punch)
    return not any(end > now for end in ends)


def punch_state(job: Job, punch: Punch, instant: Instant) -> PunchState:
    if not punch.is_open:
        return PunchState.CLOSED
    if punch.flagged_abandoned or has_abandoned_punch(job, punch, instant):
        return PunchState.ABANDONED_FLAGGED
    return PunchState.OPEN


def ensure_transition(current: PunchState, target: PunchState) -> None:
    if target not in _TRANSITIONS[current]:
        raise InvalidTransitionError(f"Punch cannot move from {current.value} to {target.value}")
