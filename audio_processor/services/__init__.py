"""Job orchestration services."""
from audio_processor.services.artifact_store import ArtifactStore
from audio_processor.services.job_store import InMemoryJobStore, JobStore
from audio_processor.services.orchestrator import Orchestrator, resolve_source_id
from audio_processor.services.retention import RetentionSweeper

__all__ = [
    'ArtifactStore',
    'InMemoryJobStore',
    'JobStore',
    'Orchestrator',
    'RetentionSweeper',
    'resolve_source_id',
]
