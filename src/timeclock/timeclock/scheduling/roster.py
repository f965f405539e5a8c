"""Roster resolution.

A day roster arrives either as the legacy flat list of applicant IDs or as a
list of structured entries (``employeeId``/``date``/``status``). The format is
detected once in :func:`parse_roster`; everything downstream works on the
``FlatRoster | StructuredRoster`` variant.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Any, Iterable, Optional, Union

from ..common.datetime_utils import day_key, get_zone, parse_iso_date
from ..core.constants import DAY_KEY_FORMAT
from ..core.enums import RosterEntryStatus
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RosterEntry:
    employee_id: str
    date: Optional[str] = None
    assigned_position: Optional[str] = None
    status: Optional[RosterEntryStatus] = None

    @property
    def is_recurring(self) -> bool:
        return self.date is None

    @property
    def is_active(self) -> bool:
        # Entries without a status predate the request workflow: approved.
        return self.status is None or self.status.is_active

    def applies_to(self, key: str) -> bool:
        return self.is_recurring or self.date == key


@dataclass(frozen=True)
class FlatRoster:
    """Legacy roster: plain set of applicant IDs, valid on every date."""

    applicant_ids: frozenset = frozenset()

    def __len__(self) -> int:
        return len(self.applicant_ids)

    def includes(self, applicant_id: str, key: Optional[str] = None) -> bool:
        return applicant_id in self.applicant_ids


@dataclass(frozen=True)
class StructuredRoster:
    entries: tuple = ()

    def __len__(self) -> int:
        return len(self.entries)

    def includes(self, applicant_id: str, key: Optional[str] = None) -> bool:
        for entry in self.entries:
            if entry.employee_id != applicant_id or not entry.is_active:
                continue
            if key is None or entry.applies_to(key):
                return True
        return False


Roster = Union[FlatRoster, StructuredRoster]

EMPTY_ROSTER = FlatRoster()


def parse_roster_entry(raw: Any) -> RosterEntry:
    if isinstance(raw, str):
        if not raw.strip():
            raise ValidationError("Roster entry has an empty employee id")
        return RosterEntry(employee_id=raw.strip())

    if not isinstance(raw, dict):
        raise ValidationError(f"Unsupported roster entry: {raw!r}")

    employee_id = raw.get("employeeId")
    if not employee_id:
        raise ValidationError("Roster entry is missing employeeId")

    entry_date = raw.get("date")
    if entry_date:
        entry_date = parse_iso_date(str(entry_date)).strftime(DAY_KEY_FORMAT)
    else:
        entry_date = None

    status = raw.get("status")
    if status:
        try:
            status = RosterEntryStatus(str(status).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown roster status: {status!r}")
    else:
        status = None

    return RosterEntry(
        employee_id=str(employee_id),
        date=entry_date,
        assigned_position=raw.get("assignedPosition") or None,
        status=status,
    )


def parse_roster(raw: Optional[Iterable[Any]]) -> Roster:
    """Build the roster variant from a stored day roster.

    A list made only of strings is the legacy flat format. Anything else is
    structured; bare strings mixed into it become recurring approved entries.
    Malformed entries are skipped.
    """
    if isinstance(raw, (FlatRoster, StructuredRoster)):
        return raw
    if not raw:
        return EMPTY_ROSTER

    items = list(raw)
    if all(isinstance(item, str) for item in items):
        return FlatRoster(frozenset(item.strip() for item in items if item and item.strip()))

    entries = []
    for item in items:
        try:
            entries.append(parse_roster_entry(item))
        except ValidationError as e:
            logger.warning("Skipping roster entry: %s", e)
    return StructuredRoster(tuple(entries))


def is_scheduled(
    roster: Union[Roster, Iterable[Any], None],
    applicant_id: str,
    target_date: Union[date, datetime, str, None] = None,
    *,
    tz: Optional[tzinfo] = None,
) -> bool:
    """Is ``applicant_id`` scheduled by this roster (on ``target_date``)?

    Without a target date the question is "ever on this roster". With one,
    dated entries must match the local calendar day while recurring entries
    match any day. Pending, rejected and cancelled entries never match.
    """
    roster = parse_roster(roster)
    if target_date is None:
        return roster.includes(applicant_id)
    key = day_key(target_date, tz or get_zone(None))
    return roster.includes(applicant_id, key)
