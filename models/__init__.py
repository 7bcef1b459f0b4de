"""In-memory job models."""

from models.job import ALLOWED_TRANSITIONS, Job, JobKind, JobStatus

__all__ = ['ALLOWED_TRANSITIONS', 'Job', 'JobKind', 'JobStatus']
