from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import PunchConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import Punch
from .repository import PunchRepository

_COLUMNS = "punch_id, applicant_id, job_id, shift_slug, time_in, time_out, user_note, flagged_abandoned"


def _to_punch(r: dict) -> Punch:
    return Punch(
        punch_id=str(r["punch_id"]),
        applicant_id=r["applicant_id"],
        job_id=r["job_id"],
        time_in=from_db_datetime(r["time_in"]),
        time_out=from_db_datetime(r.get("time_out")),
        shift_slug=r.get("shift_slug"),
        user_note=r.get("user_note"),
        flagged_abandoned=bool(r.get("flagged_abandoned")),
    )


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, punch_id: str) -> Optional[Punch]:
        if not str(punch_id).isdigit():
            return None
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM punches WHERE punch_id=%s", (int(punch_id),))
            r = fetchone(cur)
            return _to_punch(r) if r else None

    def find_open_for_applicant(self, applicant_id: str) -> Optional[Punch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM punches
                WHERE applicant_id=%s AND time_out IS NULL
                ORDER BY time_in DESC
                LIMIT 1
                """,
                (applicant_id,),
            )
            r = fetchone(cur)
            return _to_punch(r) if r else None

    def list_open_for_job(self, job_id: str) -> Sequence[Punch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM punches
                WHERE job_id=%s AND time_out IS NULL
                ORDER BY time_in
                """,
                (job_id,),
            )
            return [_to_punch(r) for r in fetchall(cur)]

    def list_overlap_candidates(
        self,
        *,
        applicant_id: str,
        start: datetime,
        until: datetime,
        exclude_punch_id: Optional[str] = None,
    ) -> Sequence[Punch]:
        sql = f"""
            SELECT {_COLUMNS}
            FROM punches
            WHERE applicant_id=%s
              AND (time_out IS NULL OR (time_out > %s AND time_in < %s))
        """
        params: list = [applicant_id, to_db_datetime(start), to_db_datetime(until)]
        if exclude_punch_id:
            sql += " AND punch_id <> %s"
            params.append(int(exclude_punch_id))
        sql += " ORDER BY time_in"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_punch(r) for r in fetchall(cur)]

    def create_open(
        self,
        *,
        applicant_id: str,
        job_id: str,
        time_in: datetime,
        shift_slug: Optional[str] = None,
        user_note: Optional[str] = None,
    ) -> Punch:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO punches(applicant_id, job_id, shift_slug, time_in, user_note)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (applicant_id, job_id, shift_slug, to_db_datetime(time_in), user_note),
                )
                punch_id = str(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            raise PunchConflictError("Applicant already has an open punch") from e

        return Punch(
            punch_id=punch_id,
            applicant_id=applicant_id,
            job_id=job_id,
            time_in=from_db_datetime(to_db_datetime(time_in)),
            shift_slug=shift_slug,
            user_note=user_note,
        )

    def close(self, *, punch_id: str, time_out: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE punches SET time_out=%s WHERE punch_id=%s AND time_out IS NULL",
                (to_db_datetime(time_out), int(punch_id)),
            )
            return cur.rowcount > 0

    def update_times(self, *, punch_id: str, time_in: datetime, time_out: Optional[datetime]) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE punches SET time_in=%s, time_out=%s WHERE punch_id=%s",
                    (to_db_datetime(time_in), to_db_datetime(time_out), int(punch_id)),
                )
                return cur.rowcount > 0
        except mysql.connector.IntegrityError as e:
            raise PunchConflictError("Applicant already has an open punch") from e

    def flag_abandoned(self, *, punch_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE punches SET flagged_abandoned=1 WHERE punch_id=%s AND time_out IS NULL",
                (int(punch_id),),
            )
            return cur.rowcount > 0
