"""
Zip container handling for DOCX packages.
"""

import os
import zipfile
from typing import List

from ..core.config import Config
from ..core.exceptions import ContainerFormatError
from ..utils.logging_config import get_module_logger


class ContainerCodec:
    """Extracts a package into a directory tree and packs a tree back into a package."""

    def __init__(self):
        self.logger = get_module_logger(__name__)

    def extract(self, archive_path: str, dest_dir: str) -> List[str]:
        """
        Decompress every entry of a zip archive into a directory.

        Existing files in ``dest_dir`` are overwritten.

        Args:
            archive_path: Path to the source package
            dest_dir: Directory receiving the entries

        Returns:
            List of extracted entry names, in archive order

        Raises:
            ContainerFormatError: If the archive is missing, corrupt or has unsafe entry names
            OSError: If the destination cannot be written
        """
        if not os.path.isfile(archive_path):
            raise ContainerFormatError(f"Archive not found: {archive_path}")

        dest_root = os.path.abspath(dest_dir)
        try:
            with zipfile.ZipFile(archive_path, 'r') as archive:
                names = archive.namelist()
                for name in names:
                    target = os.path.abspath(os.path.join(dest_root, name))
                    if os.path.commonpath([dest_root, target]) != dest_root:
                        raise ContainerFormatError(f"Entry escapes the extraction directory: {name}")
                bad_entry = archive.testzip()
                if bad_entry is not None:
                    raise ContainerFormatError(f"Corrupt entry in {archive_path}: {bad_entry}")
                archive.extractall(dest_root)
        except zipfile.BadZipFile as e:
            raise ContainerFormatError(f"Not a valid zip package: {archive_path} ({e})") from e

        self.logger.debug("  > Extracted %d entries from %s", len(names), archive_path)
        return names

    def repack(self, src_dir: str, archive_path: str) -> List[str]:
        """
        Create a zip archive from every file under a directory.

        Entry names are relative to ``src_dir`` and use forward slashes. The
        content types part is written first.

        Args:
            src_dir: Root of the working tree
            archive_path: Destination package path (overwritten)

        Returns:
            List of written entry names, in archive order

        Raises:
            OSError: If the source cannot be read or the destination written
        """
        entries = self._collect_entries(src_dir)

        output_dir = os.path.dirname(os.path.abspath(archive_path))
        os.makedirs(output_dir, exist_ok=True)

        with zipfile.ZipFile(archive_path, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
            for name in entries:
                archive.write(os.path.join(src_dir, *name.split('/')), arcname=name)

        self.logger.debug("  > Packed %d entries into %s", len(entries), archive_path)
        return entries

    @staticmethod
    def _collect_entries(src_dir: str) -> List[str]:
        if not os.path.isdir(src_dir):
            raise FileNotFoundError(f"Source directory not found: {src_dir}")

        entries = []
        for root, dirs, files in os.walk(src_dir):
            dirs.sort()
            for filename in sorted(files):
                rel_path = os.path.relpath(os.path.join(root, filename), src_dir)
                entries.append(rel_path.replace(os.sep, '/'))

        if Config.CONTENT_TYPES_PART in entries:
            entries.remove(Config.CONTENT_TYPES_PART)
            entries.insert(0, Config.CONTENT_TYPES_PART)
        return entries
