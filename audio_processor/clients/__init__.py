"""External service clients: yt-dlp and the transcription providers."""
from typing import Optional

from audio_processor.clients.assemblyai import AssemblyAIClient
from audio_processor.clients.base import TranscriptionProvider
from audio_processor.clients.extractor import AudioExtractor
from audio_processor.clients.openai import OpenAIWhisperClient
from utils.config import AppConfig
from utils.exceptions import InvalidRequestError

SUPPORTED_PROVIDERS = (AssemblyAIClient.name, OpenAIWhisperClient.name)


def get_transcription_provider(name: str, api_key: str,
                               config: Optional[AppConfig] = None) -> TranscriptionProvider:
    """Build the client for ``name`` with the caller's API key."""
    if name == OpenAIWhisperClient.name:
        return OpenAIWhisperClient(api_key, settings=config.openai if config else None)
    if name == AssemblyAIClient.name:
        return AssemblyAIClient(api_key, settings=config.assemblyai if config else None)
    raise InvalidRequestError(
        f"provider must be one of: {', '.join(SUPPORTED_PROVIDERS)}"
    )


__all__ = [
    'AssemblyAIClient',
    'AudioExtractor',
    'OpenAIWhisperClient',
    'SUPPORTED_PROVIDERS',
    'TranscriptionProvider',
    'get_transcription_provider',
]
