"""
Input data model for report assembly.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Union


@dataclass(frozen=True)
class ReportEntry:
    """One output page: a header, a description and a rendered image."""

    header: str
    description: str
    image_path: Union[str, os.PathLike]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_directory: str = '') -> 'ReportEntry':
        """
        Build an entry from a mapping with ``header``, ``description`` and ``image`` keys.

        Relative image paths are resolved against ``base_directory``.
        """
        missing = [key for key in ('header', 'description', 'image') if key not in data]
        if missing:
            raise ValueError(f"Entry is missing required keys: {', '.join(missing)}")

        image_path = str(data['image'])
        if base_directory and not os.path.isabs(image_path):
            image_path = os.path.join(base_directory, image_path)

        return cls(header=str(data['header']),
                   description=str(data['description']),
                   image_path=image_path)
