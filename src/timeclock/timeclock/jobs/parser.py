"""Build Job/Shift dataclasses from stored documents.

Documents keep the camelCase field names of the job store. Malformed parts are
skipped one at a time: a bad weekday entry drops that weekday, a shift without
``defaultSchedule`` drops that shift, and the rest of the job stays usable.
"""

from __future__ import annotations

import logging
from datetime import tzinfo
from typing import Any, Mapping, Optional

from ..common.datetime_utils import day_key, get_zone, parse_iso_date, parse_iso_datetime
from ..common.validators import as_bool, require_non_empty, require_non_negative_int
from ..core.constants import DEFAULT_EARLY_CLOCK_IN_MINUTES, DEFAULT_TIMEZONE, WEEKDAY_NAMES
from ..core.exceptions import ValidationError
from ..scheduling.roster import parse_roster
from .model import Job, JobConfig, JobLocation, ScheduleEntry, Shift

logger = logging.getLogger(__name__)


def _optional_timestamp(value: Any, tz: tzinfo):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_iso_datetime(value, tz)


def _optional_day(value: Any, tz: tzinfo):
    if not value:
        return None
    return parse_iso_date(day_key(value, tz))


def parse_applicant_ids(raw: Any) -> frozenset:
    """Flat shift roster: ID strings or applicant objects carrying ``_id``."""
    ids = set()
    for item in raw or ():
        if isinstance(item, str) and item.strip():
            ids.add(item.strip())
        elif isinstance(item, Mapping) and item.get("_id"):
            ids.add(str(item["_id"]))
        else:
            logger.warning("Skipping shift roster member without id: %r", item)
    return frozenset(ids)


def parse_schedule_entry(raw: Mapping[str, Any], tz: tzinfo) -> ScheduleEntry:
    return ScheduleEntry(
        start=_optional_timestamp(raw.get("start"), tz),
        end=_optional_timestamp(raw.get("end"), tz),
        roster=parse_roster(raw.get("roster")),
    )


def parse_shift(doc: Mapping[str, Any], tz: tzinfo) -> Shift:
    schedule_doc = doc.get("defaultSchedule")
    if not isinstance(schedule_doc, Mapping):
        raise ValidationError(f"Shift {doc.get('slug') or doc.get('shiftName')!r} has no defaultSchedule")

    schedule = {}
    for weekday in WEEKDAY_NAMES:
        raw = schedule_doc.get(weekday)
        if not raw:
            continue
        if not isinstance(raw, Mapping):
            logger.warning("Skipping %s schedule of shift %r: not an object", weekday, doc.get("slug"))
            continue
        try:
            schedule[weekday] = parse_schedule_entry(raw, tz)
        except ValidationError as e:
            logger.warning("Skipping %s schedule of shift %r: %s", weekday, doc.get("slug"), e)

    slug = doc.get("slug") or doc.get("shiftName")
    return Shift(
        slug=require_non_empty(slug, "Shift slug"),
        shift_name=str(doc.get("shiftName") or slug),
        default_schedule=schedule,
        shift_roster=parse_applicant_ids(doc.get("shiftRoster")),
        shift_start_date=_optional_day(doc.get("shiftStartDate"), tz),
        shift_end_date=_optional_day(doc.get("shiftEndDate"), tz),
    )


def parse_job_config(raw: Optional[Mapping[str, Any]]) -> JobConfig:
    raw = raw or {}
    return JobConfig(
        early_clock_in_minutes=require_non_negative_int(
            raw.get("earlyClockInMinutes"),
            "earlyClockInMinutes",
            default=DEFAULT_EARLY_CLOCK_IN_MINUTES,
        ),
        auto_adjust_early_clock_in=as_bool(raw.get("autoAdjustEarlyClockIn")),
        auto_clockout_shift_end=as_bool(raw.get("autoClockoutShiftEnd")),
        geofence=as_bool(raw.get("geofence")),
        allow_breaks=as_bool(raw.get("allowBreaks"), default=True),
    )


def parse_job_location(raw: Optional[Mapping[str, Any]]) -> Optional[JobLocation]:
    if not raw:
        return None
    try:
        latitude = float(raw["latitude"])
        longitude = float(raw["longitude"])
    except (KeyError, TypeError, ValueError):
        return None
    geo = raw.get("geocoordinates") or {}
    return JobLocation(
        latitude=latitude,
        longitude=longitude,
        grace_distance_feet=float(raw.get("graceDistanceFeet") or 0),
        geofence_radius_feet=float(geo.get("geoFenceRadius") or 0),
    )


def parse_job(doc: Mapping[str, Any], *, default_time_zone: str = DEFAULT_TIMEZONE) -> Job:
    job_id = require_non_empty(doc.get("_id"), "Job id")
    time_zone = doc.get("timeZone") or default_time_zone
    tz = get_zone(time_zone)

    shifts = []
    for shift_doc in doc.get("shifts") or ():
        try:
            shifts.append(parse_shift(shift_doc, tz))
        except (ValidationError, AttributeError) as e:
            logger.warning("Skipping malformed shift on job %s: %s", job_id, e)

    return Job(
        job_id=job_id,
        title=str(doc.get("title") or ""),
        shifts=tuple(shifts),
        config=parse_job_config(doc.get("additionalConfig")),
        location=parse_job_location(doc.get("location")),
        time_zone=time_zone,
    )
