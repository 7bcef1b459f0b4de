"""Local scratch storage for extracted audio, keyed by source id."""
import logging
import os
import re
import time
import uuid
from typing import List, Optional

from utils.exceptions import InvalidRequestError

logger = logging.getLogger(__name__)

SOURCE_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]{11}$')


class ArtifactStore:
    """Filesystem wrapper holding at most one audio file per source id.

    The store never inspects file contents; a file at :meth:`path_for` is
    considered valid because extraction only ever moves a finished file there.
    """

    def __init__(self, root: str, extension: str = 'mp3'):
        # Absolute so send_file never resolves it against the app package.
        self.root = os.path.abspath(root)
        self.extension = extension
        os.makedirs(self.root, exist_ok=True)

    @staticmethod
    def validate_source_id(source_id: str) -> str:
        if not isinstance(source_id, str) or not SOURCE_ID_PATTERN.match(source_id):
            raise InvalidRequestError(f"Invalid source id: {source_id!r}")
        return source_id

    def path_for(self, source_id: str) -> str:
        self.validate_source_id(source_id)
        return os.path.join(self.root, f"{source_id}.{self.extension}")

    def staging_path_for(self, source_id: str) -> str:
        """Unique temporary path next to the final file, so it can be moved atomically."""
        self.validate_source_id(source_id)
        return os.path.join(
            self.root, f".{source_id}.{uuid.uuid4().hex[:12]}.partial.{self.extension}"
        )

    def exists(self, source_id: str) -> bool:
        return os.path.isfile(self.path_for(source_id))

    def size(self, source_id: str) -> int:
        return os.path.getsize(self.path_for(source_id))

    def remove(self, source_id: str) -> None:
        path = self.path_for(source_id)
        try:
            os.remove(path)
            logger.debug(f"Removed artifact {path}")
        except FileNotFoundError:
            pass

    def sweep(self, max_age: float, now: Optional[float] = None) -> List[str]:
        """Delete every file under the root older than ``max_age`` seconds.

        Individual filesystem errors are logged and skipped so one bad entry
        does not stop the rest of the sweep.
        """
        now = time.time() if now is None else now
        removed = []
        try:
            entries = list(os.scandir(self.root))
        except OSError as exc:
            logger.error(f"Cleanup error: cannot list {self.root}: {exc}")
            return removed

        for entry in entries:
            try:
                if not entry.is_file(follow_symlinks=False):
                    continue
                if now - entry.stat(follow_symlinks=False).st_mtime > max_age:
                    os.remove(entry.path)
                    removed.append(entry.name)
                    logger.info(f"Deleted old file: {entry.name}")
            except FileNotFoundError:
                continue
            except OSError as exc:
                logger.warning(f"Cleanup error for {entry.name}: {exc}")
        return removed
