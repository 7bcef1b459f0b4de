"""Pytest configuration and fixtures."""
import os
from typing import Dict, List

import pytest

from audio_processor.services.artifact_store import ArtifactStore
from audio_processor.services.job_store import InMemoryJobStore
from audio_processor.services.orchestrator import Orchestrator


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment(tmp_path_factory):
    """Set up test environment variables for all tests."""
    test_env_vars = {
        "AUDIO_DIR": str(tmp_path_factory.mktemp("atasa-audio")),
        "RETENTION_SWEEP_ENABLED": "false",
        "FLASK_ENV": "testing",
        "LOG_LEVEL": "DEBUG",
    }

    previous = {key: os.environ.get(key) for key in test_env_vars}
    for key, value in test_env_vars.items():
        os.environ[key] = value

    yield

    for key, value in previous.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


@pytest.fixture(autouse=True)
def clear_config_cache():
    """Config is lru_cached; make every test see its own environment."""
    from utils.config import get_app_config

    get_app_config.cache_clear()
    yield
    get_app_config.cache_clear()


class RecordingJobStore(InMemoryJobStore):
    """Job store that remembers every status each job has been in."""

    def __init__(self):
        super().__init__()
        self.history: Dict[str, List[str]] = {}

    def create(self, job):
        created = super().create(job)
        self.history[job.job_id] = [job.status]
        return created

    def update(self, job):
        updated = super().update(job)
        self.history[job.job_id].append(job.status)
        return updated


class FakeExtractor:
    """Stands in for yt-dlp: writes ``content`` through the staging path."""

    def __init__(self, content=b"ID3-fake-mp3-bytes", error=None):
        self.content = content
        self.error = error
        self.calls = []

    def extract(self, source_id, target_path, staging_path=None):
        self.calls.append(source_id)
        if self.error is not None:
            raise self.error
        staging_path = staging_path or f"{target_path}.partial"
        with open(staging_path, "wb") as handle:
            handle.write(self.content)
        os.replace(staging_path, target_path)
        return len(self.content)


class FakeProvider:
    def __init__(self, transcript="Merhaba dünya\n", error=None):
        self.transcript = transcript
        self.error = error
        self.calls = []

    def transcribe(self, audio_path, language):
        self.calls.append((audio_path, language))
        if self.error is not None:
            raise self.error
        return self.transcript


class DeferredSpawner:
    """Captures background tasks so tests decide when they run."""

    def __init__(self):
        self.tasks = []

    def __call__(self, task, name):
        self.tasks.append((name, task))

    def run_all(self):
        while self.tasks:
            _, task = self.tasks.pop(0)
            task()


def run_inline(task, name):
    task()


@pytest.fixture
def artifact_store(tmp_path):
    return ArtifactStore(str(tmp_path / "audio"))


@pytest.fixture
def job_store():
    return RecordingJobStore()


@pytest.fixture
def fake_extractor():
    return FakeExtractor()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def provider_calls():
    return []


@pytest.fixture
def provider_factory(fake_provider, provider_calls):
    def factory(name, api_key):
        provider_calls.append((name, api_key))
        return fake_provider
    return factory


@pytest.fixture
def spawner():
    return DeferredSpawner()


@pytest.fixture
def orchestrator(job_store, artifact_store, fake_extractor, provider_factory, spawner):
    return Orchestrator(
        jobs=job_store,
        artifacts=artifact_store,
        extractor=fake_extractor,
        provider_factory=provider_factory,
        spawn=spawner,
    )


@pytest.fixture
def app(orchestrator):
    from audio_processor import create_app

    app = create_app({'TESTING': True}, orchestrator=orchestrator)
    return app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client
