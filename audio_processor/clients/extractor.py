"""yt-dlp wrapper that extracts an audio track into the artifact store."""

import logging
import os
import subprocess
from typing import Callable, List, Optional

from utils.config import ExtractionSettings
from utils.exceptions import ExtractionError, ToolInvocationError

logger = logging.getLogger(__name__)


def _stderr_tail(stderr: Optional[str], lines: int = 3) -> str:
    if not stderr:
        return ''
    tail = [line for line in stderr.strip().splitlines() if line.strip()][-lines:]
    return ' | '.join(tail)


class AudioExtractor:
    """Runs the ``yt-dlp`` command-line tool for a single source id.

    The tool writes to a staging path; only a file that actually exists after
    the process exits is moved onto the target path, so a silent no-op run is
    still reported as a failure.
    """

    def __init__(self, settings: Optional[ExtractionSettings] = None,
                 runner: Callable[..., subprocess.CompletedProcess] = subprocess.run):
        self.settings = settings or ExtractionSettings()
        self._runner = runner

    def source_url(self, source_id: str) -> str:
        return self.settings.source_url_template.format(source_id=source_id)

    def build_command(self, source_url: str, output_path: str) -> List[str]:
        return [
            self.settings.binary,
            '-f', 'bestaudio',
            '-x',
            '--audio-format', self.settings.audio_format,
            '--audio-quality', self.settings.audio_quality,
            '--no-playlist',
            '-o', output_path,
            source_url,
        ]

    def extract(self, source_id: str, target_path: str,
                staging_path: Optional[str] = None) -> int:
        """Extract audio for ``source_id`` into ``target_path``.

        Args:
            source_id: Video identifier
            target_path: Final artifact location
            staging_path: Temporary output location in the same directory
                (defaults to ``target_path + '.partial'``)

        Returns:
            Size of the extracted file in bytes

        Raises:
            ToolInvocationError: yt-dlp is missing, timed out or exited nonzero
            ExtractionError: yt-dlp reported success but produced no file
        """
        staging_path = staging_path or f"{target_path}.partial.{self.settings.audio_format}"
        url = self.source_url(source_id)
        command = self.build_command(url, staging_path)
        timeout = self.settings.timeout_seconds

        logger.info(f"Extracting audio for {source_id}...")
        try:
            try:
                result = self._runner(
                    command,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    text=True,
                    timeout=timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired as exc:
                raise ToolInvocationError(
                    f"{self.settings.binary} timed out after {timeout:g}s"
                ) from exc
            except OSError as exc:
                raise ToolInvocationError(
                    f"Failed to run {self.settings.binary}: {exc}"
                ) from exc

            if result.returncode != 0:
                detail = _stderr_tail(result.stderr)
                message = f"{self.settings.binary} exited with code {result.returncode}"
                raise ToolInvocationError(f"{message}: {detail}" if detail else message)

            if not os.path.isfile(staging_path):
                raise ExtractionError(f"{self.settings.audio_format.upper()} file not created")

            os.replace(staging_path, target_path)
        finally:
            if os.path.exists(staging_path):
                try:
                    os.remove(staging_path)
                except OSError as e:
                    logger.warning(f"Failed to cleanup staging file {staging_path}: {e}")

        size = os.path.getsize(target_path)
        logger.info(f"Audio extracted for {source_id}: {size / 1024 / 1024:.2f} MB")
        return size
