"""Filesystem and working-directory access for the cleanup orchestrator.

Both are wrapped in small classes so the orchestrator never touches the
process-wide working directory directly and tests can substitute fakes.
"""

import os
import shutil
from pathlib import Path

from logging_config import get_logger

logger = get_logger(__name__)


class LocalFilesystem:
    """Stat, remove and path arithmetic on the local disk."""

    def exists(self, path: Path) -> bool:
        # lexists: a dangling symlink still needs cleaning up
        return os.path.lexists(path)

    def remove_tree(self, path: Path) -> None:
        """Recursively remove path; a missing path is not an error."""
        try:
            if os.path.islink(path) or not os.path.isdir(path):
                os.unlink(path)
            else:
                shutil.rmtree(path)
        except FileNotFoundError:
            logger.debug(f"{path} already gone")

    def absolute(self, path: Path) -> Path:
        """Absolute path with symlinks resolved, so aliases of one directory compare equal."""
        return Path(os.path.realpath(path))

    def relative(self, path: Path, start: Path) -> Path:
        """Path of path relative to start; ValueError if there is none (different drives)."""
        return Path(os.path.relpath(path, start))


class OsLocation:
    """The process working directory."""

    def getcwd(self) -> Path:
        return Path(os.getcwd())

    def chdir(self, path: Path) -> None:
        os.chdir(path)
        logger.debug(f"Working directory is now {path}")
