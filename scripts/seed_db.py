"""Load job documents from a JSON file into the jobs table.

Usage: python scripts/seed_db.py [path/to/jobs.json]
"""

from __future__ import annotations

import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.timeclock.timeclock.database.connection import DatabaseConnection, DBConfig
from src.timeclock.timeclock.jobs.mysql_job_repository import MySQLJobRepository

logger = logging.getLogger("seed_db")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    seed_path = Path(sys.argv[1]) if len(sys.argv) > 1 else REPO_ROOT / "database" / "seed_jobs.json"
    documents = json.loads(seed_path.read_text(encoding="utf-8"))

    repo = MySQLJobRepository(
        DatabaseConnection.get_instance(DBConfig.from_dict(db_config)),
        default_time_zone=settings.TIMEZONE,
    )
    for document in documents:
        logger.info("Seeded job %s", repo.save_document(document))


if __name__ == "__main__":
    main()
