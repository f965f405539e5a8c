"""Boundary functions of the shift and punch engine.

Inputs may be parsed ``Job``/``Shift``/``Punch`` objects or the stored
documents they come from; instants may be aware datetimes or ISO-8601
strings. Timestamps come back as ISO-8601 UTC strings. Every call works on
the snapshot it is given and never fetches anything.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Union

from .clocking import eligibility, time_in
from .common.datetime_utils import Instant, get_zone, now_utc, parse_iso_datetime, to_utc_iso
from .core.constants import DEFAULT_MAX_PUNCH_HOURS, DEFAULT_TIMEZONE
from .jobs.model import Job, Shift
from .jobs.parser import parse_job, parse_shift
from .punches.model import Punch
from .punches.overlap import find_overlapping
from .scheduling import resolver

JobLike = Union[Job, Mapping[str, Any]]
ShiftLike = Union[Shift, Mapping[str, Any], None]
PunchLike = Union[Punch, Mapping[str, Any]]


def as_job(job: JobLike, *, default_time_zone: str = DEFAULT_TIMEZONE) -> Job:
    if isinstance(job, Job):
        return job
    return parse_job(job, default_time_zone=default_time_zone)


def as_shift(job: Job, shift: ShiftLike) -> Optional[Shift]:
    if shift is None or isinstance(shift, Shift):
        return shift
    return parse_shift(shift, job.tz)


def as_punch(punch: PunchLike, tz) -> Punch:
    if isinstance(punch, Punch):
        return punch
    time_out = punch.get("timeOut")
    return Punch(
        punch_id=str(punch.get("_id") or ""),
        applicant_id=str(punch.get("applicantId") or ""),
        job_id=str(punch.get("jobId") or ""),
        time_in=parse_iso_datetime(punch.get("timeIn"), tz),
        time_out=parse_iso_datetime(time_out, tz) if time_out else None,
        shift_slug=punch.get("shiftSlug"),
        user_note=punch.get("userNote"),
        flagged_abandoned=bool(punch.get("flaggedAbandoned")),
    )


def resolve_shift_window(job: JobLike, applicant_id: str, instant: Instant, shift: ShiftLike = None) -> dict:
    """``{"start": iso, "end": iso}``, or both ``None`` when no shift applies."""
    job = as_job(job)
    window = resolver.resolve_shift_window(job, applicant_id, instant, as_shift(job, shift))
    if window is None:
        return {"start": None, "end": None}
    return {"start": to_utc_iso(window.start), "end": to_utc_iso(window.end)}


def can_clock_in(job: JobLike, applicant_id: str, instant: Instant, shift: ShiftLike = None) -> bool:
    job = as_job(job)
    return eligibility.can_clock_in(job, applicant_id, instant, as_shift(job, shift))


def minutes_until_eligible(
    job: JobLike,
    applicant_id: str,
    instant: Instant,
    shift: ShiftLike = None,
) -> Optional[int]:
    job = as_job(job)
    return eligibility.minutes_until_eligible(job, applicant_id, instant, as_shift(job, shift))


def calculate_time_in(job: JobLike, applicant_id: str, instant: Instant, shift: ShiftLike = None) -> str:
    job = as_job(job)
    return to_utc_iso(time_in.calculate_time_in(job, applicant_id, instant, as_shift(job, shift)))


def has_overlap(
    applicant_id: str,
    start: Instant,
    end: Optional[Instant],
    exclude_punch_id: Optional[str],
    existing: Iterable[PunchLike],
    *,
    now: Optional[Instant] = None,
    max_punch_hours: float = DEFAULT_MAX_PUNCH_HOURS,
    tz=None,
) -> bool:
    """Overlap check against a caller-fetched set of punches.

    Punches of other applicants in ``existing`` are ignored.
    """
    tz = tz or get_zone(None)
    current = parse_iso_datetime(now, tz) if now is not None else now_utc()
    punches = [p for p in (as_punch(p, tz) for p in existing) if p.applicant_id == applicant_id]
    conflicts = find_overlapping(
        parse_iso_datetime(start, tz),
        parse_iso_datetime(end, tz) if end else None,
        punches,
        now=current,
        exclude_punch_id=exclude_punch_id,
        max_punch_hours=max_punch_hours,
    )
    return bool(conflicts)


def has_abandoned_punch(job: JobLike, punch: PunchLike, instant: Instant) -> bool:
    job = as_job(job)
    return time_in.has_abandoned_punch(job, as_punch(punch, job.tz), instant)
