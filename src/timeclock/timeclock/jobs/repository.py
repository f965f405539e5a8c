from __future__ import annotations

from typing import Optional, Protocol

from .model import Job


class JobRepository(Protocol):
    def get_by_id(self, job_id: str) -> Optional[Job]:
        raise NotImplementedError
