"""Today's-shift resolution.

Finds the ``(start, end)`` window that governs an applicant at an instant:
the current weekday's schedule first, then yesterday's schedule when it is an
overnight shift that is still running.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from ..common.datetime_utils import Instant, local_date, parse_iso_datetime, to_utc, weekday_name
from ..jobs.model import Job, Shift
from .projection import is_overnight, project_to_day
from .roster import is_scheduled

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShiftWindow:
    """``start`` and ``end`` are UTC instants."""

    start: datetime
    end: datetime
    shift: Shift
    work_date: date
    overnight_from_previous_day: bool = False

    def contains(self, instant: datetime, *, early_minutes: int = 0) -> bool:
        earliest = self.start - timedelta(minutes=early_minutes)
        return earliest <= instant <= self.end


@dataclass(frozen=True)
class ResolvedWindows:
    """Both windows that can govern an instant."""

    today: Optional[ShiftWindow] = None
    overnight: Optional[ShiftWindow] = None

    def __iter__(self):
        return iter(w for w in (self.today, self.overnight) if w is not None)

    @property
    def primary(self) -> Optional[ShiftWindow]:
        return self.today or self.overnight


def candidate_shifts(job: Job, applicant_id: str, shift: Optional[Shift] = None) -> List[Shift]:
    """Shifts whose flat roster contains the applicant."""
    pool: Iterable[Shift] = (shift,) if shift is not None else job.shifts
    return [s for s in pool if s.has_member(applicant_id)]


def _window_for_day(job: Job, shift: Shift, applicant_id: str, day: date) -> Optional[ShiftWindow]:
    tz = job.tz
    if not shift.covers(day):
        return None

    entry = shift.schedule_for(weekday_name(day))
    if entry is None or not entry.has_window:
        return None

    # An empty day roster is open to every member of the shift roster.
    if len(entry.roster) and not is_scheduled(entry.roster, applicant_id, day, tz=tz):
        return None

    start = project_to_day(entry.start, day, tz=tz)
    end = project_to_day(entry.end, day, overnight_anchor=entry.start, tz=tz)
    return ShiftWindow(
        start=to_utc(start),
        end=to_utc(end),
        shift=shift,
        work_date=day,
        overnight_from_previous_day=False,
    )


def resolve_windows(
    job: Job,
    applicant_id: str,
    instant: Instant,
    shift: Optional[Shift] = None,
) -> ResolvedWindows:
    tz = job.tz
    now = parse_iso_datetime(instant, tz)
    today = local_date(now, tz)
    yesterday = today - timedelta(days=1)

    candidates = candidate_shifts(job, applicant_id, shift)
    if not candidates:
        logger.debug("Applicant %s is on no shift roster of job %s", applicant_id, job.job_id)
        return ResolvedWindows()

    today_window = None
    for candidate in candidates:
        today_window = _window_for_day(job, candidate, applicant_id, today)
        if today_window is not None:
            break

    overnight_window = None
    for candidate in candidates:
        window = _window_for_day(job, candidate, applicant_id, yesterday)
        if window is None or not is_overnight(window.start, window.end, tz):
            continue
        if now > window.end:
            continue
        overnight_window = ShiftWindow(
            start=window.start,
            end=window.end,
            shift=window.shift,
            work_date=window.work_date,
            overnight_from_previous_day=True,
        )
        break

    return ResolvedWindows(today=today_window, overnight=overnight_window)


def resolve_shift_window(
    job: Job,
    applicant_id: str,
    instant: Instant,
    shift: Optional[Shift] = None,
) -> Optional[ShiftWindow]:
    """The window governing ``applicant_id`` at ``instant``, or ``None``.

    First matching candidate wins; pass ``shift`` to disambiguate.
    """
    return resolve_windows(job, applicant_id, instant, shift).primary
