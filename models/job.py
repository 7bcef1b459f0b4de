"""Job model for tracking extraction/transcription work in memory."""
from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from utils.exceptions import JobStateError


class JobStatus:
    """Job status values."""

    PROCESSING = 'processing'
    EXTRACTING = 'extracting'
    TRANSCRIBING = 'transcribing'
    COMPLETED = 'completed'
    FAILED = 'failed'

    ALL = (PROCESSING, EXTRACTING, TRANSCRIBING, COMPLETED, FAILED)
    INITIAL = (PROCESSING, EXTRACTING, TRANSCRIBING)
    TERMINAL = (COMPLETED, FAILED)


class JobKind:
    EXTRACTION = 'extraction'
    TRANSCRIPTION = 'transcription'


# Every status may only move forward along these edges.
ALLOWED_TRANSITIONS = {
    JobStatus.PROCESSING: (JobStatus.COMPLETED, JobStatus.FAILED),
    JobStatus.EXTRACTING: (JobStatus.TRANSCRIBING, JobStatus.FAILED),
    JobStatus.TRANSCRIBING: (JobStatus.COMPLETED, JobStatus.FAILED),
    JobStatus.COMPLETED: (),
    JobStatus.FAILED: (),
}


def _isoformat(timestamp: Optional[float]) -> Optional[str]:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, timezone.utc).isoformat()


@dataclass(frozen=True)
class Job:
    """One unit of asynchronous extraction and/or transcription work.

    Records are immutable; every stage produces a replacement through
    :meth:`transition`, :meth:`complete` or :meth:`fail`.
    """

    job_id: str
    source_id: str
    kind: str
    status: str
    created_at: float
    updated_at: Optional[float] = None
    provider: Optional[str] = None
    language: Optional[str] = None
    result_ref: Optional[str] = None
    file_size: Optional[int] = None
    error: Optional[str] = None

    def __post_init__(self):
        if self.status not in JobStatus.ALL:
            raise JobStateError(f"Unknown job status: {self.status}")

    @property
    def is_terminal(self) -> bool:
        return self.status in JobStatus.TERMINAL

    def can_transition_to(self, status: str) -> bool:
        return status in ALLOWED_TRANSITIONS.get(self.status, ())

    def transition(self, status: str, **changes: Any) -> 'Job':
        """Return a copy of this job moved to ``status``.

        Raises:
            JobStateError: If the move goes backwards, skips a stage or leaves
                a terminal status.
        """
        if not self.can_transition_to(status):
            raise JobStateError(
                f"Job {self.job_id} cannot move from {self.status} to {status}"
            )
        changes.setdefault('updated_at', time.time())
        return dataclasses.replace(self, status=status, **changes)

    def complete(self, result_ref: str, file_size: Optional[int] = None) -> 'Job':
        return self.transition(
            JobStatus.COMPLETED,
            result_ref=result_ref,
            file_size=file_size if file_size is not None else self.file_size,
            error=None,
        )

    def fail(self, error: str) -> 'Job':
        return self.transition(JobStatus.FAILED, result_ref=None, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert job to the dictionary served by ``GET /status/<job_id>``."""
        data = {
            'jobId': self.job_id,
            'videoId': self.source_id,
            'type': self.kind,
            'status': self.status,
            'resultRef': self.result_ref,
            'fileSize': self.file_size,
            'error': self.error,
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at),
        }
        if self.kind == JobKind.TRANSCRIPTION:
            data['transcript'] = self.result_ref
            data['provider'] = self.provider
            data['language'] = self.language
        else:
            data['audioPath'] = self.result_ref
        return data

    def __repr__(self):
        return f'<Job {self.job_id} source={self.source_id} type={self.kind} status={self.status}>'
