from __future__ import annotations

from dataclasses import dataclass

from .core.constants import DEFAULT_MAX_PUNCH_HOURS, DEFAULT_TIMEZONE
from .database.connection import DatabaseConnection, DBConfig
from .jobs.mysql_job_repository import MySQLJobRepository
from .jobs.repository import JobRepository
from .punches.mysql_punch_repository import MySQLPunchRepository
from .punches.overlap import PunchOverlapDetector
from .punches.repository import PunchRepository
from .punches.service import PunchService


@dataclass(frozen=True)
class Container:
    jobs_repo: JobRepository
    punches_repo: PunchRepository

    overlap_detector: PunchOverlapDetector
    punch_service: PunchService


def build_services(
    *,
    jobs_repo: JobRepository,
    punches_repo: PunchRepository,
    max_punch_hours: float = DEFAULT_MAX_PUNCH_HOURS,
) -> Container:
    overlap_detector = PunchOverlapDetector(punches_repo, max_punch_hours=max_punch_hours)
    punch_service = PunchService(punches_repo, jobs_repo, overlap=overlap_detector)
    return Container(
        jobs_repo=jobs_repo,
        punches_repo=punches_repo,
        overlap_detector=overlap_detector,
        punch_service=punch_service,
    )


def build_container(
    *,
    db_config: dict,
    default_time_zone: str = DEFAULT_TIMEZONE,
    max_punch_hours: float = DEFAULT_MAX_PUNCH_HOURS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        jobs_repo=MySQLJobRepository(conn, default_time_zone=default_time_zone),
        punches_repo=MySQLPunchRepository(conn),
        max_punch_hours=max_punch_hours,
    )
