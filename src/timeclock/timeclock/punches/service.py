from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional

from ..clocking.eligibility import can_clock_in, early_clock_in_allowance, minutes_until_eligible
from ..clocking.time_in import (
    auto_clockout_time,
    calculate_time_in,
    ensure_transition,
    has_abandoned_punch,
    punch_state,
)
from ..common.datetime_utils import Instant, get_zone, now_utc, parse_iso_datetime
from ..core.constants import DEFAULT_MAX_PUNCH_HOURS
from ..core.enums import PunchState
from ..core.exceptions import (
    ClockInNotAllowedError,
    InvalidTransitionError,
    NotFoundError,
    PunchConflictError,
    ValidationError,
)
from ..jobs.geofence import within_geofence
from ..jobs.model import Job, Shift
from ..jobs.repository import JobRepository
from ..scheduling.resolver import ShiftWindow, resolve_windows
from .model import Punch
from .overlap import PunchOverlapDetector
from .repository import PunchRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class ClockInStatus:
    can_clock_in: bool
    minutes_until_eligible: Optional[int]
    window: Optional[ShiftWindow]
    time_in: datetime


@dataclass(frozen=True)
class SweepResult:
    flagged: tuple = ()
    closed: tuple = ()


class PunchService:
    def __init__(
        self,
        punches: PunchRepository,
        jobs: JobRepository,
        *,
        overlap: PunchOverlapDetector | None = None,
        max_punch_hours: float = DEFAULT_MAX_PUNCH_HOURS,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._punches = punches
        self._jobs = jobs
        self._clock = clock
        self._overlap = overlap or PunchOverlapDetector(punches, max_punch_hours=max_punch_hours, clock=clock)

    def _get_job(self, job_id: str) -> Job:
        job = self._jobs.get_by_id(job_id)
        if not job:
            raise NotFoundError(f"Job {job_id} not found")
        if not job.shifts:
            logger.warning("Job %s has no usable shifts", job_id)
        return job

    def _get_punch(self, punch_id: str) -> Punch:
        punch = self._punches.get_by_id(punch_id)
        if not punch:
            raise NotFoundError(f"Punch {punch_id} not found")
        return punch

    @staticmethod
    def _get_shift(job: Job, shift_slug: Optional[str]) -> Optional[Shift]:
        if not shift_slug:
            return None
        shift = job.find_shift(shift_slug)
        if not shift:
            raise ValidationError(f"Shift {shift_slug} does not belong to job {job.job_id}")
        return shift

    def _now(self, now: Optional[Instant], job: Job) -> datetime:
        return parse_iso_datetime(now, job.tz) if now is not None else self._clock()

    def _punch_zone(self, punch: Punch):
        """Zone of the punch's job; naive correction times are read in it."""
        job = self._jobs.get_by_id(punch.job_id)
        return job.tz if job else get_zone(None)

    def clock_in_status(
        self,
        *,
        job_id: str,
        applicant_id: str,
        now: Optional[Instant] = None,
        shift_slug: Optional[str] = None,
    ) -> ClockInStatus:
        job = self._get_job(job_id)
        shift = self._get_shift(job, shift_slug)
        now = self._now(now, job)
        return ClockInStatus(
            can_clock_in=can_clock_in(job, applicant_id, now, shift),
            minutes_until_eligible=minutes_until_eligible(job, applicant_id, now, shift),
            window=resolve_windows(job, applicant_id, now, shift).primary,
            time_in=calculate_time_in(job, applicant_id, now, shift),
        )

    def clock_in(
        self,
        *,
        job_id: str,
        applicant_id: str,
        now: Optional[Instant] = None,
        shift_slug: Optional[str] = None,
        coordinates: Optional[Coordinates] = None,
        user_note: Optional[str] = None,
    ) -> Punch:
        job = self._get_job(job_id)
        shift = self._get_shift(job, shift_slug)
        now = self._now(now, job)

        if self._punches.find_open_for_applicant(applicant_id):
            raise PunchConflictError("You are already clocked in")

        if job.config.geofence:
            if coordinates is None:
                raise ValidationError("Clock-in coordinates are required for this job")
            if not within_geofence(job, coordinates.latitude, coordinates.longitude):
                raise ValidationError("Not within allowable distance of job location")

        allowance = early_clock_in_allowance(job)
        eligible = [
            w for w in resolve_windows(job, applicant_id, now, shift) if w.contains(now, early_minutes=allowance)
        ]
        if not eligible:
            minutes = minutes_until_eligible(job, applicant_id, now, shift)
            if minutes is None:
                raise ClockInNotAllowedError("No valid shift for today")
            if minutes == 0:
                raise ClockInNotAllowedError("Your shift for today has already ended", minutes_until_eligible=0)
            raise ClockInNotAllowedError(
                f"Clock-in opens in {minutes} minute(s)",
                minutes_until_eligible=minutes,
            )
        window = eligible[0]

        if not job.config.allow_breaks:
            previous = self._punches.list_overlap_candidates(
                applicant_id=applicant_id,
                start=window.start,
                until=window.end,
            )
            if any(p.job_id == job.job_id for p in previous):
                raise ValidationError("You cannot clock in again during this shift because breaks are not allowed")

        time_in = calculate_time_in(job, applicant_id, now, window.shift)
        if self._overlap.has_overlap(applicant_id, time_in, None, now=now):
            raise PunchConflictError("Clocking in now would overlap an existing punch")

        punch = self._punches.create_open(
            applicant_id=applicant_id,
            job_id=job.job_id,
            time_in=time_in,
            shift_slug=window.shift.slug,
            user_note=(user_note or "").strip() or None,
        )
        logger.info("Applicant %s clocked in to job %s shift %s at %s", applicant_id, job.job_id, window.shift.slug, time_in)
        return punch

    def clock_out(self, *, punch_id: str, now: Optional[Instant] = None) -> Punch:
        punch = self._get_punch(punch_id)
        if not punch.is_open:
            ensure_transition(PunchState.CLOSED, PunchState.CLOSED)

        now = parse_iso_datetime(now, self._punch_zone(punch)) if now is not None else self._clock()
        time_out = max(now, punch.time_in)
        if not self._punches.close(punch_id=punch.punch_id, time_out=time_out):
            raise InvalidTransitionError("Punch was already closed")

        logger.info("Applicant %s clocked out of punch %s at %s", punch.applicant_id, punch.punch_id, time_out)
        return replace(punch, time_out=time_out)

    def update_punch(
        self,
        *,
        punch_id: str,
        time_in: Instant,
        time_out: Optional[Instant] = None,
        now: Optional[Instant] = None,
    ) -> Punch:
        """Correct the times of an existing punch.

        Rejected when the new range would overlap another punch of the same
        applicant, or when it would reopen a closed punch.
        """
        punch = self._get_punch(punch_id)
        tz = self._punch_zone(punch)
        new_in = parse_iso_datetime(time_in, tz)
        new_out = parse_iso_datetime(time_out, tz) if time_out else None

        if new_out is not None and new_out < new_in:
            raise ValidationError("Time out must not be earlier than time in")
        if punch.time_out is not None and new_out is None:
            ensure_transition(PunchState.CLOSED, PunchState.OPEN)

        now = parse_iso_datetime(now, tz) if now is not None else self._clock()
        if self._overlap.has_overlap(punch.applicant_id, new_in, new_out, punch.punch_id, now=now):
            raise PunchConflictError("Making this change would create a punch overlap")

        if not self._punches.update_times(punch_id=punch.punch_id, time_in=new_in, time_out=new_out):
            raise NotFoundError(f"Punch {punch_id} not found")
        logger.info("Punch %s corrected to %s -> %s", punch.punch_id, new_in, new_out or "open")
        return replace(punch, time_in=new_in, time_out=new_out)

    def sweep_abandoned(self, *, job_id: str, now: Optional[Instant] = None) -> SweepResult:
        """Flag (or auto-close at shift end) every abandoned open punch of a job."""
        job = self._get_job(job_id)
        now = self._now(now, job)

        flagged = []
        closed = []
        for punch in self._punches.list_open_for_job(job.job_id):
            if not has_abandoned_punch(job, punch, now):
                continue

            state = punch_state(job, punch, now)
            if job.config.auto_clockout_shift_end:
                ensure_transition(state, PunchState.CLOSED)
                time_out = auto_clockout_time(job, punch)
                if self._punches.close(punch_id=punch.punch_id, time_out=time_out):
                    closed.append(replace(punch, time_out=time_out))
            elif not punch.flagged_abandoned:
                ensure_transition(PunchState.OPEN, PunchState.ABANDONED_FLAGGED)
                if self._punches.flag_abandoned(punch_id=punch.punch_id):
                    flagged.append(replace(punch, flagged_abandoned=True))

        if flagged or closed:
            logger.info(
                "Abandoned punch sweep for job %s: %d flagged, %d closed", job.job_id, len(flagged), len(closed)
            )
        return SweepResult(flagged=tuple(flagged), closed=tuple(closed))
