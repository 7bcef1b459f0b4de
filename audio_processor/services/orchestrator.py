"""Job orchestration for extraction and transcription requests.

Both entry points validate synchronously, register a job and return it at
once; all slow work (yt-dlp, provider HTTP calls, polling sleeps) happens in a
background task spawned per job. A task is the only writer of its job record
and never raises: every failure ends up in ``job.error`` with status
``failed``.
"""
import logging
import re
import threading
import time
import uuid
from typing import Callable, Optional

from audio_processor.clients import SUPPORTED_PROVIDERS
from audio_processor.clients.base import TranscriptionProvider
from audio_processor.clients.extractor import AudioExtractor
from audio_processor.services.artifact_store import SOURCE_ID_PATTERN, ArtifactStore
from audio_processor.services.job_store import JobStore
from models.job import Job, JobKind, JobStatus
from utils.exceptions import InvalidRequestError, NotFoundError

logger = logging.getLogger(__name__)

_URL_ID_PATTERN = re.compile(r'(?:v=|/)([A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])')

ProviderFactory = Callable[[str, str], TranscriptionProvider]
Spawner = Callable[[Callable[[], None], str], None]


def spawn_thread(task: Callable[[], None], name: str) -> None:
    """Run ``task`` on a detached daemon thread (abandoned on shutdown)."""
    threading.Thread(target=task, name=name, daemon=True).start()


def resolve_source_id(value: Optional[str]) -> str:
    """Return the 11-character video id from a bare id or a video URL.

    Raises:
        InvalidRequestError: If no id can be resolved.
    """
    if not value or not isinstance(value, str):
        raise InvalidRequestError('videoId or youtubeUrl required')
    value = value.strip()
    if SOURCE_ID_PATTERN.match(value):
        return value
    match = _URL_ID_PATTERN.search(value)
    if match:
        return match.group(1)
    raise InvalidRequestError(f"Could not resolve a video id from {value!r}")


class Orchestrator:
    """Creates jobs and drives them through their status transitions."""

    def __init__(self, jobs: JobStore, artifacts: ArtifactStore, extractor: AudioExtractor,
                 provider_factory: ProviderFactory, *, default_language: str = 'tr',
                 spawn: Optional[Spawner] = None,
                 clock: Callable[[], float] = time.time):
        self.jobs = jobs
        self.artifacts = artifacts
        self.extractor = extractor
        self.provider_factory = provider_factory
        self.default_language = default_language
        self._spawn = spawn or spawn_thread
        self._clock = clock

    # ------------------------------------------------------------------
    # Entry points

    def request_extraction(self, source: Optional[str]) -> Job:
        """Accept an extraction request and start it in the background."""
        source_id = resolve_source_id(source)
        job = self._register(
            Job(
                job_id=self._new_job_id(source_id),
                source_id=source_id,
                kind=JobKind.EXTRACTION,
                status=JobStatus.PROCESSING,
                created_at=self._clock(),
            )
        )
        self._spawn(lambda: self._run_extraction(job), f"extract-{job.job_id}")
        return job

    def request_transcription(self, source_id: Optional[str], provider: Optional[str],
                              api_key: Optional[str], language: Optional[str] = None) -> Job:
        """Accept a transcription request, extracting first when no artifact is cached."""
        if not source_id:
            raise InvalidRequestError('videoId required')
        source_id = resolve_source_id(source_id)
        if not api_key or not str(api_key).strip():
            raise InvalidRequestError('apiKey required')
        if provider not in SUPPORTED_PROVIDERS:
            raise InvalidRequestError(
                f"provider must be {' or '.join(SUPPORTED_PROVIDERS)}"
            )
        language = language or self.default_language

        needs_extraction = not self.artifacts.exists(source_id)
        job = self._register(
            Job(
                job_id=self._new_job_id(source_id, prefix='transcribe'),
                source_id=source_id,
                kind=JobKind.TRANSCRIPTION,
                status=JobStatus.EXTRACTING if needs_extraction else JobStatus.TRANSCRIBING,
                created_at=self._clock(),
                provider=provider,
                language=language,
            )
        )
        self._spawn(
            lambda: self._run_transcription(job, api_key, needs_extraction),
            f"transcribe-{job.job_id}",
        )
        return job

    # ------------------------------------------------------------------
    # Background tasks

    def _run_extraction(self, job: Job) -> None:
        try:
            # Drop the previous artifact so a failed run never serves stale audio.
            self.artifacts.remove(job.source_id)
            path, size = self._extract(job.source_id)
            self._save(job.complete(result_ref=path, file_size=size))
        except Exception as exc:  # pylint: disable=broad-except
            logger.error(f"Extraction failed for {job.source_id}: {exc}")
            self._save_failure(job, exc)

    def _run_transcription(self, job: Job, api_key: str, needs_extraction: bool) -> None:
        try:
            provider = self.provider_factory(job.provider, api_key)
            if needs_extraction:
                _, size = self._extract(job.source_id)
                job = self._save(job.transition(JobStatus.TRANSCRIBING, file_size=size))
            else:
                logger.info(f"Transcribing existing audio for {job.source_id}...")

            transcript = provider.transcribe(self.artifacts.path_for(job.source_id), job.language)
            self._save(job.complete(result_ref=transcript))
            logger.info(f"Job {job.job_id} completed with {job.provider}")
        except Exception as exc:  # pylint: disable=broad-except
            logger.error(f"Failed for {job.source_id} ({job.job_id}): {exc}")
            self._save_failure(job, exc)

    # ------------------------------------------------------------------
    # Helpers

    def _extract(self, source_id: str):
        target = self.artifacts.path_for(source_id)
        size = self.extractor.extract(
            source_id, target, staging_path=self.artifacts.staging_path_for(source_id)
        )
        return target, size

    def _register(self, job: Job) -> Job:
        self.jobs.create(job)
        logger.info(f"Job {job.job_id} accepted ({job.kind}, status={job.status})")
        return job

    def _save(self, job: Job) -> Job:
        self.jobs.update(job)
        logger.info(f"Job {job.job_id} -> {job.status}")
        return job

    def _save_failure(self, job: Job, exc: Exception) -> None:
        try:
            self._save(job.fail(str(exc)))
        except NotFoundError:
            logger.warning(f"Job {job.job_id} expired before its failure could be recorded")

    def _new_job_id(self, source_id: str, prefix: Optional[str] = None) -> str:
        millis = int(self._clock() * 1000)
        parts = [prefix] if prefix else []
        parts += [source_id, str(millis), uuid.uuid4().hex[:6]]
        return '-'.join(parts)
