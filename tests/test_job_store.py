"""Tests for the job model state machine and the in-memory job registry."""
import pytest

from audio_processor.services.job_store import InMemoryJobStore
from models.job import Job, JobKind, JobStatus
from utils.exceptions import JobStateError, NotFoundError


def make_job(job_id="abc12345678-1700000000000-a1b2c3", status=JobStatus.PROCESSING,
             created_at=1_700_000_000.0, kind=JobKind.EXTRACTION):
    return Job(
        job_id=job_id,
        source_id="abc12345678",
        kind=kind,
        status=status,
        created_at=created_at,
    )


class TestJobTransitions:

    @pytest.mark.parametrize("start,target", [
        (JobStatus.PROCESSING, JobStatus.COMPLETED),
        (JobStatus.PROCESSING, JobStatus.FAILED),
        (JobStatus.EXTRACTING, JobStatus.TRANSCRIBING),
        (JobStatus.EXTRACTING, JobStatus.FAILED),
        (JobStatus.TRANSCRIBING, JobStatus.COMPLETED),
        (JobStatus.TRANSCRIBING, JobStatus.FAILED),
    ])
    def test_allowed_transitions(self, start, target):
        job = make_job(status=start)
        assert job.transition(target).status == target

    @pytest.mark.parametrize("start,target", [
        (JobStatus.TRANSCRIBING, JobStatus.EXTRACTING),
        (JobStatus.EXTRACTING, JobStatus.COMPLETED),
        (JobStatus.PROCESSING, JobStatus.TRANSCRIBING),
        (JobStatus.COMPLETED, JobStatus.FAILED),
        (JobStatus.FAILED, JobStatus.COMPLETED),
        (JobStatus.COMPLETED, JobStatus.PROCESSING),
    ])
    def test_rejected_transitions(self, start, target):
        job = make_job(status=start)
        with pytest.raises(JobStateError):
            job.transition(target)

    def test_unknown_status_rejected(self):
        with pytest.raises(JobStateError):
            make_job(status="queued")

    def test_complete_sets_result_only(self):
        job = make_job().complete(result_ref="/tmp/abc12345678.mp3", file_size=2048)

        assert job.status == JobStatus.COMPLETED
        assert job.result_ref == "/tmp/abc12345678.mp3"
        assert job.file_size == 2048
        assert job.error is None
        assert job.is_terminal

    def test_fail_sets_error_only(self):
        job = make_job().fail("yt-dlp exited with code 1")

        assert job.status == JobStatus.FAILED
        assert job.error == "yt-dlp exited with code 1"
        assert job.result_ref is None

    def test_transition_returns_new_record(self):
        job = make_job(status=JobStatus.EXTRACTING, kind=JobKind.TRANSCRIPTION)
        moved = job.transition(JobStatus.TRANSCRIBING)

        assert job.status == JobStatus.EXTRACTING
        assert moved.status == JobStatus.TRANSCRIBING
        assert moved.updated_at is not None

    def test_to_dict_extraction(self):
        data = make_job().complete(result_ref="/tmp/abc12345678.mp3", file_size=10).to_dict()

        assert data["jobId"] == "abc12345678-1700000000000-a1b2c3"
        assert data["videoId"] == "abc12345678"
        assert data["status"] == "completed"
        assert data["audioPath"] == "/tmp/abc12345678.mp3"
        assert data["resultRef"] == "/tmp/abc12345678.mp3"
        assert data["fileSize"] == 10
        assert data["error"] is None
        assert data["createdAt"].startswith("2023-11-14T22:13:20")
        assert "transcript" not in data

    def test_to_dict_transcription(self):
        job = Job(
            job_id="transcribe-abc12345678-1700000000000-a1b2c3",
            source_id="abc12345678",
            kind=JobKind.TRANSCRIPTION,
            status=JobStatus.TRANSCRIBING,
            created_at=1_700_000_000.0,
            provider="openai",
            language="tr",
        )
        data = job.complete(result_ref="merhaba").to_dict()

        assert data["transcript"] == "merhaba"
        assert data["provider"] == "openai"
        assert data["language"] == "tr"
        assert "audioPath" not in data


class TestInMemoryJobStore:

    def setup_method(self):
        self.store = InMemoryJobStore()

    def test_create_and_get(self):
        job = self.store.create(make_job())
        assert self.store.get(job.job_id) == job
        assert len(self.store) == 1

    def test_create_duplicate_id_rejected(self):
        self.store.create(make_job())
        with pytest.raises(JobStateError):
            self.store.create(make_job())

    def test_get_unknown_raises_not_found(self):
        with pytest.raises(NotFoundError):
            self.store.get("missing")
        assert self.store.find("missing") is None

    def test_update_is_full_replace(self):
        job = self.store.create(make_job())
        done = job.complete(result_ref="/tmp/a.mp3", file_size=5)

        self.store.update(done)

        assert self.store.get(job.job_id) is done

    def test_update_unknown_job(self):
        with pytest.raises(NotFoundError):
            self.store.update(make_job().complete(result_ref="x"))

    def test_update_rejects_backward_move(self):
        job = make_job(status=JobStatus.EXTRACTING, kind=JobKind.TRANSCRIPTION)
        self.store.create(job)
        self.store.update(job.transition(JobStatus.TRANSCRIBING))

        with pytest.raises(JobStateError):
            self.store.update(job)

    def test_terminal_record_is_immutable(self):
        job = self.store.create(make_job())
        done = job.complete(result_ref="/tmp/a.mp3")
        self.store.update(done)

        with pytest.raises(JobStateError):
            self.store.update(job.fail("late failure"))
        assert self.store.get(job.job_id).status == JobStatus.COMPLETED

    def test_delete_is_idempotent(self):
        job = self.store.create(make_job())
        self.store.delete(job.job_id)
        self.store.delete(job.job_id)
        assert self.store.find(job.job_id) is None

    def test_sweep_removes_only_expired(self):
        now = 1_700_010_000.0
        old = self.store.create(make_job(job_id="old", created_at=now - 3601))
        young = self.store.create(make_job(job_id="young", created_at=now - 3599))

        removed = self.store.sweep(3600, now=now)

        assert removed == [old.job_id]
        assert self.store.find(old.job_id) is None
        assert self.store.get(young.job_id) == young

    def test_sweep_removes_terminal_and_running_jobs_alike(self):
        now = 1_700_010_000.0
        job = self.store.create(make_job(created_at=now - 7200))
        self.store.update(job.fail("boom"))

        self.store.sweep(3600, now=now)

        with pytest.raises(NotFoundError):
            self.store.get(job.job_id)
