"""Job registry: process-wide mapping from job id to job record."""
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from models.job import Job
from utils.exceptions import JobStateError, NotFoundError

logger = logging.getLogger(__name__)


class JobStore(ABC):
    """Storage contract for job records.

    Updates are full-record replacements. Each job id is written by exactly
    one background task, so implementations only need to keep the mapping
    itself consistent.
    """

    @abstractmethod
    def create(self, job: Job) -> Job:
        """Register a new job; the id must be unused."""

    @abstractmethod
    def update(self, job: Job) -> Job:
        """Replace the stored record for ``job.job_id``."""

    @abstractmethod
    def find(self, job_id: str) -> Optional[Job]:
        """Return the job or ``None``."""

    @abstractmethod
    def delete(self, job_id: str) -> None:
        """Remove a job; no error if absent."""

    @abstractmethod
    def sweep(self, max_age: float, now: Optional[float] = None) -> List[str]:
        """Remove every job created more than ``max_age`` seconds ago."""

    def get(self, job_id: str) -> Job:
        """Return the job.

        Raises:
            NotFoundError: If the id is unknown or has been swept.
        """
        job = self.find(job_id)
        if job is None:
            raise NotFoundError(f"Job not found: {job_id}")
        return job


class InMemoryJobStore(JobStore):
    """Dict-backed store, rebuilt empty on every restart."""

    def __init__(self):
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()

    def create(self, job: Job) -> Job:
        with self._lock:
            if job.job_id in self._jobs:
                raise JobStateError(f"Job already exists: {job.job_id}")
            self._jobs[job.job_id] = job
        logger.debug(f"Job {job.job_id} created in status {job.status}")
        return job

    def update(self, job: Job) -> Job:
        with self._lock:
            current = self._jobs.get(job.job_id)
            if current is None:
                raise NotFoundError(f"Job not found: {job.job_id}")
            if not current.can_transition_to(job.status):
                raise JobStateError(
                    f"Job {job.job_id} cannot move from {current.status} to {job.status}"
                )
            self._jobs[job.job_id] = job
        logger.debug(f"Job {job.job_id}: {current.status} -> {job.status}")
        return job

    def find(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def delete(self, job_id: str) -> None:
        with self._lock:
            self._jobs.pop(job_id, None)

    def sweep(self, max_age: float, now: Optional[float] = None) -> List[str]:
        now = time.time() if now is None else now
        with self._lock:
            expired = [
                job_id for job_id, job in self._jobs.items()
                if now - job.created_at > max_age
            ]
            for job_id in expired:
                del self._jobs[job_id]
        if expired:
            logger.info(f"Swept {len(expired)} expired job(s)")
        return expired

    def __len__(self):
        with self._lock:
            return len(self._jobs)
