from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Union

from ..common.datetime_utils import local_date, to_local


def time_of_day(value: datetime, tz: tzinfo) -> time:
    """Wall-clock time of ``value`` in ``tz``; its calendar date is dropped."""
    return to_local(value, tz).time().replace(tzinfo=None)


def _combine(day: date, clock: time, tz: tzinfo) -> datetime:
    return datetime.combine(day, clock, tzinfo=tz)


def project_to_day(
    time_of_day_value: datetime,
    reference_date: Union[date, datetime],
    overnight_anchor: Optional[datetime] = None,
    *,
    tz: tzinfo,
) -> datetime:
    """Place a shift time-of-day on the local calendar day of ``reference_date``.

    When ``overnight_anchor`` (normally the shift start) is given and the
    projected value is not strictly after the anchor projected onto the same
    day, the result moves to the next calendar day: 23:00-02:00 ends on D+1.
    """
    day = local_date(reference_date, tz)
    clock = time_of_day(time_of_day_value, tz)
    result = _combine(day, clock, tz)

    if overnight_anchor is not None:
        anchor = _combine(day, time_of_day(overnight_anchor, tz), tz)
        if result <= anchor:
            result = _combine(day + timedelta(days=1), clock, tz)

    return result


def is_overnight(start: datetime, end: datetime, tz: tzinfo) -> bool:
    """End time-of-day strictly earlier than start time-of-day."""
    return time_of_day(end, tz) < time_of_day(start, tz)
