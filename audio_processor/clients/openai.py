"""OpenAI Whisper client using the caller's API key."""
import logging
import os
from typing import Optional

import openai

from audio_processor.clients.base import TranscriptionProvider
from utils.config import OpenAISettings
from utils.exceptions import ProviderError


logger = logging.getLogger(__name__)


def _error_message(response) -> str:
    """Prefer the structured ``error.message``; fall back to the raw body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict):
        error = payload.get('error')
        if isinstance(error, dict) and error.get('message'):
            return error['message']
        if isinstance(error, str) and error:
            return error
    return response.text


class OpenAIWhisperClient(TranscriptionProvider):
    """Immediate-style provider: one multipart upload, transcript in the response."""

    name = 'openai'

    def __init__(self, api_key: str, settings: Optional[OpenAISettings] = None):
        super().__init__(api_key)
        self.settings = settings or OpenAISettings()
        # No retries anywhere in the pipeline; a failed call fails the job.
        self._client = openai.OpenAI(
            api_key=self._api_key,
            base_url=self.settings.base_url,
            timeout=self.settings.request_timeout,
            max_retries=0,
        )
        logger.info(f"OpenAI client initialized with user API key, model {self.settings.model}")

    def transcribe(self, audio_path: str, language: str) -> str:
        """Transcribe an audio file with Whisper.

        Args:
            audio_path: Path to audio file
            language: Language code for transcription

        Returns:
            The response body, unchanged

        Raises:
            ProviderError: OpenAI returned a non-success status or could not be reached
        """
        logger.info("Transcribing with OpenAI Whisper...")
        audio_bytes = self.read_audio(audio_path)

        try:
            response = self._client.audio.transcriptions.create(
                model=self.settings.model,
                file=(os.path.basename(audio_path), audio_bytes, 'audio/mpeg'),
                language=language,
                response_format='text',
            )
        except openai.APIStatusError as exc:
            message = _error_message(exc.response)
            logger.error(f"OpenAI transcription failed ({exc.status_code}): {message}")
            raise ProviderError(message) from exc
        except openai.APIConnectionError as exc:
            logger.error(f"OpenAI request failed: {exc}")
            raise ProviderError(f"OpenAI request failed: {exc}") from exc

        transcript = response if isinstance(response, str) else getattr(response, 'text', '')
        logger.info(f"OpenAI transcription completed ({len(transcript)} chars)")
        return transcript
