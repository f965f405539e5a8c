from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from typing import Mapping, Optional

from ..common.datetime_utils import get_zone
from ..core.constants import DEFAULT_EARLY_CLOCK_IN_MINUTES, DEFAULT_TIMEZONE
from ..scheduling.roster import EMPTY_ROSTER, Roster


@dataclass(frozen=True)
class ScheduleEntry:
    """One weekday of a shift's default schedule.

    Only the time-of-day of ``start``/``end`` is meaningful.
    """

    start: Optional[datetime]
    end: Optional[datetime]
    roster: Roster = EMPTY_ROSTER

    @property
    def has_window(self) -> bool:
        return self.start is not None and self.end is not None


@dataclass(frozen=True)
class Shift:
    slug: str
    shift_name: str
    default_schedule: Mapping[str, ScheduleEntry]
    shift_roster: frozenset = frozenset()
    shift_start_date: Optional[date] = None
    shift_end_date: Optional[date] = None

    def schedule_for(self, weekday: str) -> Optional[ScheduleEntry]:
        return self.default_schedule.get(weekday)

    def has_member(self, applicant_id: str) -> bool:
        return applicant_id in self.shift_roster

    def covers(self, day: date) -> bool:
        """Validity range check; both ends inclusive, a missing end is open."""
        if self.shift_start_date and day < self.shift_start_date:
            return False
        if self.shift_end_date and day > self.shift_end_date:
            return False
        return True


@dataclass(frozen=True)
class JobConfig:
    early_clock_in_minutes: int = DEFAULT_EARLY_CLOCK_IN_MINUTES
    auto_adjust_early_clock_in: bool = False
    auto_clockout_shift_end: bool = False
    geofence: bool = False
    allow_breaks: bool = True


@dataclass(frozen=True)
class JobLocation:
    latitude: float
    longitude: float
    grace_distance_feet: float = 0.0
    geofence_radius_feet: float = 0.0

    @property
    def allowed_distance_feet(self) -> float:
        return self.grace_distance_feet + self.geofence_radius_feet


@dataclass(frozen=True)
class Job:
    job_id: str
    title: str
    shifts: tuple = ()
    config: JobConfig = field(default_factory=JobConfig)
    location: Optional[JobLocation] = None
    time_zone: str = DEFAULT_TIMEZONE

    @property
    def tz(self) -> tzinfo:
        return get_zone(self.time_zone)

    def find_shift(self, slug: Optional[str]) -> Optional[Shift]:
        if not slug:
            return None
        for shift in self.shifts:
            if shift.slug == slug:
                return shift
        return None
