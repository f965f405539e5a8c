from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from src.timeclock.timeclock import engine
from src.timeclock.timeclock.clocking.time_in import (
    auto_clockout_time,
    calculate_time_in,
    ensure_transition,
    has_abandoned_punch,
    punch_state,
)
from src.timeclock.timeclock.core.enums import PunchState
from src.timeclock.timeclock.core.exceptions import InvalidTransitionError
from src.timeclock.timeclock.jobs.parser import parse_job
from src.timeclock.timeclock.punches.model import Punch

CHICAGO = ZoneInfo("America/Chicago")


def _punch(time_in, time_out=None, **kw):
    return Punch(
        punch_id=kw.pop("punch_id", "p1"),
        applicant_id=kw.pop("applicant_id", "a1"),
        job_id="job-1",
        time_in=time_in,
        time_out=time_out,
        **kw,
    )


def test_early_clock_in_is_snapped_to_shift_start(job):
    assert calculate_time_in(job, "a1", "2024-06-10T08:55:00") == datetime(2024, 6, 10, 9, 0, tzinfo=CHICAGO)


def test_clock_in_after_start_keeps_actual_time(job):
    assert calculate_time_in(job, "a1", "2024-06-10T09:07:00") == datetime(2024, 6, 10, 9, 7, tzinfo=CHICAGO)


def test_no_snapping_without_auto_adjust(make_job):
    job = make_job(autoAdjustEarlyClockIn=False)
    assert calculate_time_in(job, "a1", "2024-06-10T08:55:00") == datetime(2024, 6, 10, 8, 55, tzinfo=CHICAGO)


def test_no_snapping_without_window(job):
    assert calculate_time_in(job, "stranger", "2024-06-10T08:55:00") == datetime(2024, 6, 10, 8, 55, tzinfo=CHICAGO)


def test_time_in_end_to_end(job_doc):
    assert engine.calculate_time_in(job_doc, "a1", "2024-06-10T08:55:00") == "2024-06-10T14:00:00Z"


def test_punch_abandoned_after_every_shift_of_the_day_ended(job_doc):
    job_doc["shifts"] = job_doc["shifts"][:1]
    job = parse_job(job_doc)
    punch = _punch(datetime(2024, 6, 10, 9, 0, tzinfo=CHICAGO))

    assert has_abandoned_punch(job, punch, "2024-06-10T18:00:00")
    assert not has_abandoned_punch(job, punch, "2024-06-10T16:00:00")


def test_overnight_shift_of_the_day_keeps_punch_alive(job):
    # The night shift also runs on Mondays and ends Tuesday 06:00.
    punch = _punch(datetime(2024, 6, 10, 22, 0, tzinfo=CHICAGO), applicant_id="a3")

    assert not has_abandoned_punch(job, punch, "2024-06-11T05:00:00")
    assert has_abandoned_punch(job, punch, "2024-06-11T07:00:00")


def test_punch_after_midnight_is_governed_by_previous_overnight_shift(job):
    punch = _punch(datetime(2024, 6, 11, 1, 0, tzinfo=CHICAGO), applicant_id="a3")

    assert not has_abandoned_punch(job, punch, "2024-06-11T05:00:00")
    # Tuesday day shift still running at 10:00.
    assert not has_abandoned_punch(job, punch, "2024-06-11T10:00:00")
    assert has_abandoned_punch(job, punch, "2024-06-11T17:30:00")


def test_closed_punch_is_never_abandoned(job):
    punch = _punch(datetime(2024, 6, 10, 9, 0, tzinfo=CHICAGO), datetime(2024, 6, 10, 12, 0, tzinfo=CHICAGO))
    assert not has_abandoned_punch(job, punch, "2024-06-11T18:00:00")


def test_punch_on_weekday_without_shifts_is_abandoned(job):
    punch = _punch(datetime(2024, 6, 15, 9, 0, tzinfo=CHICAGO))

    assert has_abandoned_punch(job, punch, "2024-06-15T10:00:00")
    assert has_abandoned_punch(job, punch, "2024-06-20T09:00:00")
    assert auto_clockout_time(job, punch) == punch.time_in


def test_abandonment_with_documents(job_doc):
    job_doc["shifts"] = job_doc["shifts"][:1]
    punch = {"_id": "p1", "applicantId": "a1", "jobId": "job-1", "timeIn": "2024-06-10T14:00:00Z", "timeOut": None}
    assert engine.has_abandoned_punch(job_doc, punch, "2024-06-10T23:00:00Z")


def test_auto_clockout_uses_latest_governing_end(job):
    day_punch = _punch(datetime(2024, 6, 10, 9, 0, tzinfo=CHICAGO))
    assert auto_clockout_time(job, day_punch) == datetime(2024, 6, 11, 6, 0, tzinfo=CHICAGO)


def test_auto_clockout_single_shift_day(job_doc):
    job_doc["shifts"] = job_doc["shifts"][:1]
    job = parse_job(job_doc)
    punch = _punch(datetime(2024, 6, 10, 9, 0, tzinfo=CHICAGO))

    assert auto_clockout_time(job, punch) == datetime(2024, 6, 10, 17, 0, tzinfo=CHICAGO)


def test_punch_state(job):
    opened = _punch(datetime(2024, 6, 10, 9, 0, tzinfo=CHICAGO))

    assert punch_state(job, opened, "2024-06-10T12:00:00") == PunchState.OPEN
    assert punch_state(job, opened, "2024-06-11T07:00:00") == PunchState.ABANDONED_FLAGGED
    closed = _punch(opened.time_in, datetime(2024, 6, 10, 17, 0, tzinfo=CHICAGO))
    assert punch_state(job, closed, "2024-06-11T07:00:00") == PunchState.CLOSED


@pytest.mark.parametrize(
    "current, target",
    [
        (PunchState.OPEN, PunchState.CLOSED),
        (PunchState.OPEN, PunchState.ABANDONED_FLAGGED),
        (PunchState.ABANDONED_FLAGGED, PunchState.CLOSED),
    ],
)
def test_allowed_transitions(current, target):
    ensure_transition(current, target)


@pytest.mark.parametrize(
    "current, target",
    [
        (PunchState.CLOSED, PunchState.OPEN),
        (PunchState.CLOSED, PunchState.CLOSED),
        (PunchState.ABANDONED_FLAGGED, PunchState.OPEN),
    ],
)
def test_rejected_transitions(current, target):
    with pytest.raises(InvalidTransitionError):
        ensure_transition(current, target)
