"""Application configuration utilities."""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional
import os
import tempfile

from dotenv import load_dotenv


load_dotenv()


@dataclass(frozen=True)
class ExtractionSettings:
    binary: str = "yt-dlp"
    audio_format: str = "mp3"
    audio_quality: str = "128K"
    timeout_seconds: float = 300.0
    source_url_template: str = "https://www.youtube.com/watch?v={source_id}"


@dataclass(frozen=True)
class OpenAISettings:
    model: str = "whisper-1"
    request_timeout: float = 300.0
    base_url: Optional[str] = None


@dataclass(frozen=True)
class AssemblyAISettings:
    upload_url: str = "https://api.assemblyai.com/v2/upload"
    transcript_url: str = "https://api.assemblyai.com/v2/transcript"
    poll_interval_seconds: float = 5.0
    max_poll_attempts: int = 120
    request_timeout: float = 300.0


@dataclass(frozen=True)
class RetentionSettings:
    max_age_seconds: float = 3600.0
    sweep_interval_seconds: float = 3600.0
    enabled: bool = True


@dataclass(frozen=True)
class AppConfig:
    audio_dir: str
    default_language: str = "tr"
    extraction: ExtractionSettings = field(default_factory=ExtractionSettings)
    openai: OpenAISettings = field(default_factory=OpenAISettings)
    assemblyai: AssemblyAISettings = field(default_factory=AssemblyAISettings)
    retention: RetentionSettings = field(default_factory=RetentionSettings)
    allowed_origins: tuple[str, ...] = field(default_factory=lambda: ("*",))


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be a number, got {raw!r}") from exc


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}") from exc


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@lru_cache(maxsize=1)
def get_app_config() -> AppConfig:
    audio_dir = os.getenv("AUDIO_DIR") or os.path.join(tempfile.gettempdir(), "atasa-audio")

    return AppConfig(
        audio_dir=audio_dir,
        default_language=os.getenv("DEFAULT_LANGUAGE", "tr"),
        extraction=ExtractionSettings(
            binary=os.getenv("YTDLP_BINARY", "yt-dlp"),
            audio_quality=os.getenv("AUDIO_QUALITY", "128K"),
            timeout_seconds=_get_float("EXTRACTION_TIMEOUT_SECONDS", 300.0),
            source_url_template=os.getenv(
                "SOURCE_URL_TEMPLATE", "https://www.youtube.com/watch?v={source_id}"
            ),
        ),
        openai=OpenAISettings(
            model=os.getenv("OPENAI_TRANSCRIPTION_MODEL", "whisper-1"),
            request_timeout=_get_float("OPENAI_REQUEST_TIMEOUT_SECONDS", 300.0),
            base_url=os.getenv("OPENAI_BASE_URL") or None,
        ),
        assemblyai=AssemblyAISettings(
            poll_interval_seconds=_get_float("ASSEMBLYAI_POLL_INTERVAL_SECONDS", 5.0),
            max_poll_attempts=_get_int("ASSEMBLYAI_MAX_POLL_ATTEMPTS", 120),
            request_timeout=_get_float("ASSEMBLYAI_REQUEST_TIMEOUT_SECONDS", 300.0),
        ),
        retention=RetentionSettings(
            max_age_seconds=_get_float("RETENTION_MAX_AGE_SECONDS", 3600.0),
            sweep_interval_seconds=_get_float("RETENTION_SWEEP_INTERVAL_SECONDS", 3600.0),
            enabled=_get_bool("RETENTION_SWEEP_ENABLED", True),
        ),
        allowed_origins=tuple(
            origin.strip()
            for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
        ),
    )
