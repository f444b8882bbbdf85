"""
Access to uploaded payment‑proof files.

Uploads are handled elsewhere; the registration service only needs to
check whether a recorded file still exists and to remove it when the
registration is deleted.  Relative paths are resolved against the
configured upload directory, and no path outside that directory is
ever touched.
"""

import logging
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)


class LocalFileStore:
    """File store backed by the local filesystem."""

    def __init__(self, base_dir: str) -> None:
        self.base_dir = Path(base_dir).resolve()

    def resolve(self, path: str) -> Optional[Path]:
        """Return the absolute location of ``path`` inside the store.

        Returns ``None`` when the path escapes the upload directory,
        either through ``..`` segments, a symlink or an absolute path
        elsewhere on disk.
        """
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.base_dir / candidate
        candidate = candidate.resolve()
        if not candidate.is_relative_to(self.base_dir):
            return None
        return candidate

    def exists(self, path: str) -> bool:
        target = self.resolve(path)
        if target is None:
            logger.warning("Ignoring stored file path outside %s: %s", self.base_dir, path)
            return False
        return target.is_file()

    def delete(self, path: str) -> None:
        """Remove a stored file.  Raises ``OSError`` if removal fails."""
        target = self.resolve(path)
        if target is None:
            raise PermissionError(f"{path} is outside the upload directory")
        target.unlink()
        logger.info("Deleted stored file %s", target)
