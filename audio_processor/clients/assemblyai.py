"""AssemblyAI REST client: upload, submit, then poll until the transcript is ready."""
import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from audio_processor.clients.base import TranscriptionProvider
from utils.config import AssemblyAISettings
from utils.exceptions import ProviderError, TranscriptionTimeoutError, UploadError


logger = logging.getLogger(__name__)


def _json_or_none(response: requests.Response) -> Optional[Dict[str, Any]]:
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


class AssemblyAIClient(TranscriptionProvider):
    """Poll-style provider.

    The ``sleep`` callable is injectable so tests can run the polling loop
    without waiting; the attempt budget bounds the loop regardless.
    """

    name = 'assemblyai'

    def __init__(self, api_key: str, settings: Optional[AssemblyAISettings] = None,
                 session: Optional[requests.Session] = None,
                 sleep: Callable[[float], None] = time.sleep):
        super().__init__(api_key)
        self.settings = settings or AssemblyAISettings()
        self._session = session or requests.Session()
        self._sleep = sleep

    @property
    def _headers(self) -> Dict[str, str]:
        return {'Authorization': self._api_key}

    def transcribe(self, audio_path: str, language: str) -> str:
        logger.info("Transcribing with AssemblyAI...")
        upload_url = self.upload(audio_path)
        transcript_id = self.submit(upload_url, language)
        return self.wait_for_completion(transcript_id)

    def upload(self, audio_path: str) -> str:
        """Upload the raw audio bytes and return the provider's upload URL."""
        logger.info("Uploading to AssemblyAI...")
        audio_bytes = self.read_audio(audio_path)
        try:
            response = self._session.post(
                self.settings.upload_url,
                headers={**self._headers, 'Content-Type': 'application/octet-stream'},
                data=audio_bytes,
                timeout=self.settings.request_timeout,
            )
        except requests.RequestException as exc:
            raise UploadError(f"Upload failed: {exc}") from exc

        payload = _json_or_none(response)
        if not payload or not payload.get('upload_url'):
            logger.error(f"AssemblyAI upload failed with status {response.status_code}")
            raise UploadError('Upload failed')

        logger.info("Upload successful")
        return payload['upload_url']

    def submit(self, upload_url: str, language: str) -> str:
        """Start a transcription job and return its id."""
        logger.info("Starting transcription...")
        try:
            response = self._session.post(
                self.settings.transcript_url,
                headers={**self._headers, 'Content-Type': 'application/json'},
                json={'audio_url': upload_url, 'language_code': language},
                timeout=self.settings.request_timeout,
            )
        except requests.RequestException as exc:
            raise ProviderError(f"AssemblyAI request failed: {exc}") from exc

        payload = _json_or_none(response)
        if payload is None:
            raise ProviderError(response.text or f"AssemblyAI returned status {response.status_code}")
        if payload.get('error'):
            raise ProviderError(str(payload['error']))
        if not response.ok or not payload.get('id'):
            raise ProviderError(f"AssemblyAI returned status {response.status_code} without a transcript id")

        transcript_id = payload['id']
        logger.info(f"Transcript job: {transcript_id}")
        return transcript_id

    def wait_for_completion(self, transcript_id: str) -> str:
        """Poll the transcript until it completes, errors, or the budget runs out.

        Raises:
            ProviderError: The provider reported an error status
            TranscriptionTimeoutError: No terminal status within the attempt budget
        """
        url = f"{self.settings.transcript_url.rstrip('/')}/{transcript_id}"
        max_attempts = self.settings.max_poll_attempts

        for attempt in range(1, max_attempts + 1):
            self._sleep(self.settings.poll_interval_seconds)
            try:
                response = self._session.get(
                    url, headers=self._headers, timeout=self.settings.request_timeout
                )
            except requests.RequestException as exc:
                raise ProviderError(f"AssemblyAI request failed: {exc}") from exc

            payload = _json_or_none(response)
            if payload is None:
                raise ProviderError(response.text or f"AssemblyAI returned status {response.status_code}")

            status = payload.get('status')
            if status == 'completed':
                text = payload.get('text') or ''
                logger.info(f"AssemblyAI transcription completed ({len(text)} chars)")
                return text
            if status == 'error':
                raise ProviderError(payload.get('error') or 'Transcription failed')
            if not response.ok or payload.get('error'):
                raise ProviderError(
                    str(payload.get('error') or f"AssemblyAI returned status {response.status_code}")
                )

            if attempt % 6 == 0:
                logger.info(f"Polling {attempt}: {status}")

        raise TranscriptionTimeoutError(
            f"Transcription timeout after {max_attempts} polling attempts"
        )
