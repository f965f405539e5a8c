from __future__ import annotations

import json
import logging
from typing import Any, Optional

from ..core.constants import DEFAULT_TIMEZONE
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Job
from .parser import parse_job
from .repository import JobRepository

logger = logging.getLogger(__name__)


class MySQLJobRepository(JobRepository):
    """Jobs are stored as whole documents (shifts embedded) in a JSON column."""

    def __init__(self, conn_factory: DatabaseConnection, *, default_time_zone: str = DEFAULT_TIMEZONE):
        self._conn_factory = conn_factory
        self._default_time_zone = default_time_zone

    def _to_job(self, row: dict) -> Optional[Job]:
        document: Any = row["document"]
        if isinstance(document, (bytes, bytearray)):
            document = document.decode("utf-8")
        if isinstance(document, str):
            document = json.loads(document)
        document = dict(document)
        document.setdefault("_id", row["job_id"])
        try:
            job = parse_job(document, default_time_zone=self._default_time_zone)
        except ValidationError as e:
            logger.warning("Skipping job %s: %s", row["job_id"], e)
            return None
        if not job.shifts:
            logger.warning("Job %s has no usable shifts", job.job_id)
        return job

    def get_by_id(self, job_id: str) -> Optional[Job]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT job_id, document
                FROM jobs
                WHERE job_id=%s
                """,
                (job_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return self._to_job(r)

    def save_document(self, document: dict) -> str:
        job = parse_job(document, default_time_zone=self._default_time_zone)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO jobs(job_id, title, document)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE title=VALUES(title), document=VALUES(document)
                """,
                (job.job_id, job.title, json.dumps(document)),
            )
        return job.job_id
