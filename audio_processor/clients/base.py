"""Base class for speech-to-text provider clients."""
from __future__ import annotations

import os
from abc import ABC, abstractmethod

from utils.exceptions import InvalidRequestError, TranscriptionError


class TranscriptionProvider(ABC):
    """A provider turns a local audio file into transcript text.

    Credentials are supplied by the caller for every client instance; nothing
    is read from the environment.
    """

    name: str = ''

    def __init__(self, api_key: str):
        if not api_key or not str(api_key).strip():
            raise InvalidRequestError(f"{self.name or 'Provider'} API key is required")
        self._api_key = str(api_key).strip()

    @abstractmethod
    def transcribe(self, audio_path: str, language: str) -> str:
        """Transcribe ``audio_path`` in ``language`` and return the text."""

    @staticmethod
    def read_audio(audio_path: str) -> bytes:
        """Load the whole file; target files are small enough to buffer."""
        try:
            with open(audio_path, 'rb') as audio_file:
                return audio_file.read()
        except OSError as exc:
            raise TranscriptionError(
                f"Cannot read audio file {os.path.basename(audio_path)}: {exc}"
            ) from exc
