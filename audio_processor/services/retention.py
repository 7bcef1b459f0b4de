"""Periodic cleanup of expired artifacts and job records."""
import logging
import threading
import time
from typing import Optional, Tuple, List

from audio_processor.services.artifact_store import ArtifactStore
from audio_processor.services.job_store import JobStore

logger = logging.getLogger(__name__)


class RetentionSweeper:
    """Background loop that sweeps both stores on a fixed interval."""

    def __init__(self, jobs: JobStore, artifacts: ArtifactStore,
                 max_age: float = 3600.0, interval: float = 3600.0):
        self.jobs = jobs
        self.artifacts = artifacts
        self.max_age = max_age
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run_once(self, now: Optional[float] = None) -> Tuple[List[str], List[str]]:
        """Run one sweep of both stores; errors are logged, never raised."""
        now = time.time() if now is None else now
        removed_files: List[str] = []
        removed_jobs: List[str] = []

        try:
            removed_files = self.artifacts.sweep(self.max_age, now=now)
        except Exception as exc:  # pylint: disable=broad-except
            logger.error(f"Cleanup error: {exc}")

        try:
            removed_jobs = self.jobs.sweep(self.max_age, now=now)
        except Exception as exc:  # pylint: disable=broad-except
            logger.error(f"Job cleanup error: {exc}")

        return removed_files, removed_jobs

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name='retention-sweeper', daemon=True)
        self._thread.start()
        logger.info(f"Retention sweeper started (interval={self.interval:g}s, max_age={self.max_age:g}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            self.run_once()
