"""
Scratch directory management for a single assembly run.
"""

import os
import shutil
import tempfile
from typing import Optional

from ..core.config import Config
from .logging_config import get_module_logger


class WorkingTree:
    """
    Scoped scratch directory mirroring the contents of a package.

    Used as a context manager: the directory is created on entry and removed
    on exit, whether the block finished normally or raised.
    """

    def __init__(self, path: Optional[str] = None, keep_temp: bool = False):
        """
        Args:
            path: Directory to use. Any stale content there is removed first.
                When omitted a unique directory is created in the system temp dir.
            keep_temp: Leave the directory in place on exit (debugging aid)
        """
        self.requested_path = path
        self.keep_temp = keep_temp
        self.path = None
        self.logger = get_module_logger(__name__)

    def __enter__(self) -> 'WorkingTree':
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()
        return False

    def acquire(self) -> str:
        """Create a fresh, empty working directory and return its path."""
        if self.requested_path:
            path = os.path.abspath(self.requested_path)
            if os.path.exists(path):
                self.logger.debug("  > Removing stale working tree: %s", path)
                shutil.rmtree(path)
            os.makedirs(path)
        else:
            path = tempfile.mkdtemp(prefix=Config.WORK_DIR_PREFIX)
        self.path = path
        self.logger.debug("  > Working tree: %s", path)
        return path

    def resolve(self, relative_path: str) -> str:
        """Return the absolute path of a package part inside the tree."""
        if self.path is None:
            raise RuntimeError("Working tree has not been acquired")
        return os.path.join(self.path, *relative_path.split('/'))

    def copy_file(self, source: str, relative_path: str) -> str:
        """
        Copy an external file into the tree, creating parent directories.

        Raises:
            OSError: If the source cannot be read or the destination written
        """
        destination = self.resolve(relative_path)
        os.makedirs(os.path.dirname(destination), exist_ok=True)
        shutil.copyfile(source, destination)
        self.logger.debug("  > Copied %s -> %s", source, relative_path)
        return destination

    def cleanup(self) -> None:
        """Remove the working directory unless it is being kept."""
        if self.path is None:
            return
        if self.keep_temp:
            self.logger.info("  > Keeping working tree: %s", self.path)
        else:
            shutil.rmtree(self.path, ignore_errors=True)
            self.logger.debug("  > Removed working tree: %s", self.path)
        self.path = None
