from __future__ import annotations

import copy
from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from src.timeclock.timeclock.container import build_services
from src.timeclock.timeclock.core.exceptions import PunchConflictError
from src.timeclock.timeclock.jobs.model import Job
from src.timeclock.timeclock.jobs.parser import parse_job
from src.timeclock.timeclock.punches.model import Punch

# 2024-06-10 is a Monday; America/Chicago is UTC-5 in June.
WEEKDAY_9_TO_5 = {"start": "2024-01-01T09:00:00", "end": "2024-01-01T17:00:00", "roster": []}

JOB_DOCUMENT = {
    "_id": "job-1",
    "title": "Warehouse Associate",
    "timeZone": "America/Chicago",
    "additionalConfig": {
        "earlyClockInMinutes": 15,
        "autoAdjustEarlyClockIn": True,
        "autoClockoutShiftEnd": False,
        "geofence": False,
        "allowBreaks": True,
    },
    "shifts": [
        {
            "slug": "day",
            "shiftName": "Day",
            "shiftRoster": ["a1", "a2"],
            "defaultSchedule": {
                "monday": dict(WEEKDAY_9_TO_5),
                "tuesday": dict(WEEKDAY_9_TO_5),
                "wednesday": dict(WEEKDAY_9_TO_5),
                "thursday": dict(WEEKDAY_9_TO_5),
                "friday": dict(WEEKDAY_9_TO_5),
            },
        },
        {
            "slug": "night",
            "shiftName": "Night",
            "shiftRoster": ["a3"],
            "defaultSchedule": {
                "monday": {"start": "2024-01-01T22:00:00", "end": "2024-01-02T06:00:00", "roster": []},
            },
        },
    ],
}


@pytest.fixture
def job_doc():
    return copy.deepcopy(JOB_DOCUMENT)


@pytest.fixture
def make_job(job_doc):
    def _make(**config) -> Job:
        doc = copy.deepcopy(job_doc)
        doc["additionalConfig"].update(config)
        return parse_job(doc)

    return _make


@pytest.fixture
def job(make_job) -> Job:
    return make_job()


class InMemoryJobs:
    def __init__(self, *jobs: Job):
        self._jobs = {j.job_id: j for j in jobs}

    def get_by_id(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)


class InMemoryPunches:
    def __init__(self, *punches: Punch):
        self._punches: dict[str, Punch] = {}
        self._next_id = 1
        for p in punches:
            self._punches[p.punch_id] = p
            self._next_id += 1

    def all(self):
        return sorted(self._punches.values(), key=lambda p: p.time_in)

    def get_by_id(self, punch_id: str) -> Optional[Punch]:
        return self._punches.get(str(punch_id))

    def find_open_for_applicant(self, applicant_id: str) -> Optional[Punch]:
        for p in self.all():
            if p.applicant_id == applicant_id and p.time_out is None:
                return p
        return None

    def list_open_for_job(self, job_id: str):
        return [p for p in self.all() if p.job_id == job_id and p.time_out is None]

    def list_overlap_candidates(self, *, applicant_id, start, until, exclude_punch_id=None):
        return [
            p
            for p in self.all()
            if p.applicant_id == applicant_id
            and p.punch_id != exclude_punch_id
            and (p.time_out is None or (p.time_out > start and p.time_in < until))
        ]

    def create_open(self, *, applicant_id, job_id, time_in: datetime, shift_slug=None, user_note=None) -> Punch:
        if self.find_open_for_applicant(applicant_id):
            raise PunchConflictError("Applicant already has an open punch")
        punch = Punch(
            punch_id=str(self._next_id),
            applicant_id=applicant_id,
            job_id=job_id,
            time_in=time_in,
            shift_slug=shift_slug,
            user_note=user_note,
        )
        self._next_id += 1
        self._punches[punch.punch_id] = punch
        return punch

    def close(self, *, punch_id, time_out) -> bool:
        punch = self._punches.get(punch_id)
        if not punch or punch.time_out is not None:
            return False
        self._punches[punch_id] = replace(punch, time_out=time_out)
        return True

    def update_times(self, *, punch_id, time_in, time_out) -> bool:
        punch = self._punches.get(punch_id)
        if not punch:
            return False
        self._punches[punch_id] = replace(punch, time_in=time_in, time_out=time_out)
        return True

    def flag_abandoned(self, *, punch_id) -> bool:
        punch = self._punches.get(punch_id)
        if not punch or punch.time_out is not None:
            return False
        self._punches[punch_id] = replace(punch, flagged_abandoned=True)
        return True


@pytest.fixture
def make_services():
    """Container wired to in-memory repositories for the given job."""

    def _make(*jobs: Job, punches=()):
        return build_services(jobs_repo=InMemoryJobs(*jobs), punches_repo=InMemoryPunches(*punches))

    return _make
