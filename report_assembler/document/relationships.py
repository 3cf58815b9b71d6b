"""
Relationship manifest (``*.rels``) handling.
"""

import os
import posixpath
import re
from typing import Dict, Iterable, List, Optional, Set

from lxml import etree

from ..core.config import Config
from ..core.exceptions import DuplicateIdError, MalformedMarkupError
from ..utils.logging_config import get_module_logger
from .markup_tree import MarkupTree

RELS_NS = Config.NAMESPACES['rel']
RELATIONSHIPS_TAG = f'{{{RELS_NS}}}Relationships'
RELATIONSHIP_TAG = f'{{{RELS_NS}}}Relationship'


class RelationshipManifest:
    """
    Mapping of relationship ids to targets for one package part.

    The manifest owns id allocation: ids are built from a counter that starts
    above every numeric id already present and only ever increases.
    """

    def __init__(self, markup: MarkupTree):
        self.markup = markup
        self.logger = get_module_logger(__name__)
        self._elements: Dict[str, etree._Element] = {}
        for element in markup.root.iter(RELATIONSHIP_TAG):
            rel_id = element.get('Id')
            if not rel_id:
                raise MalformedMarkupError("Relationship without an Id attribute")
            if rel_id in self._elements:
                raise DuplicateIdError(f"Relationship id '{rel_id}' appears twice in the manifest")
            self._elements[rel_id] = element
        self._counter = max([Config.REL_ID_START] + [n + 1 for n in self._numeric_ids()])

    @classmethod
    def load(cls, path: str) -> 'RelationshipManifest':
        """
        Parse a relationships part.

        Raises:
            MalformedMarkupError: If the file is not XML or its root is not ``Relationships``
            DuplicateIdError: If the file already lists an id twice
        """
        markup = MarkupTree.parse(path)
        if markup.root.tag != RELATIONSHIPS_TAG:
            raise MalformedMarkupError(f"Unexpected root element {markup.root.tag} in {path}")
        return cls(markup)

    def _numeric_ids(self) -> List[int]:
        pattern = re.compile(rf'^{re.escape(Config.REL_ID_PREFIX)}(\d+)$')
        return [int(match.group(1)) for match in map(pattern.match, self._elements) if match]

    @staticmethod
    def counter_of(rel_id: str) -> int:
        """Numeric part of an allocated id, e.g. 12 for ``rId12``."""
        return int(rel_id[len(Config.REL_ID_PREFIX):])

    def allocate_id(self) -> str:
        """Return a fresh id unique within this manifest."""
        rel_id = Config.get_rel_id(self._counter)
        while rel_id in self._elements:
            self._counter += 1
            rel_id = Config.get_rel_id(self._counter)
        self._counter += 1
        return rel_id

    def add_entry(self, rel_id: str, target: str, kind: str = Config.IMAGE_RELATIONSHIP_TYPE) -> etree._Element:
        """
        Insert a relationship.

        Raises:
            DuplicateIdError: If ``rel_id`` is already present
        """
        if rel_id in self._elements:
            raise DuplicateIdError(f"Relationship id '{rel_id}' already exists "
                                   f"(target {self._elements[rel_id].get('Target')})")
        element = etree.SubElement(self.markup.root, RELATIONSHIP_TAG)
        element.set('Id', rel_id)
        element.set('Type', kind)
        element.set('Target', target)
        self._elements[rel_id] = element
        self.logger.debug("  > Relationship %s -> %s", rel_id, target)
        return element

    def remove_entry(self, rel_id: str) -> str:
        """Drop a relationship and return its target."""
        element = self._elements.pop(rel_id)
        self.markup.root.remove(element)
        return element.get('Target')

    def is_external(self, rel_id: str) -> bool:
        return self._elements[rel_id].get('TargetMode') == 'External'

    def get_target(self, rel_id: str) -> Optional[str]:
        element = self._elements.get(rel_id)
        return None if element is None else element.get('Target')

    def get_type(self, rel_id: str) -> Optional[str]:
        element = self._elements.get(rel_id)
        return None if element is None else element.get('Type')

    def ids(self) -> List[str]:
        return list(self._elements)

    def ids_of_type(self, kind: str) -> List[str]:
        return [rel_id for rel_id, element in self._elements.items() if element.get('Type') == kind]

    def targets(self, rel_ids: Optional[Iterable[str]] = None) -> List[str]:
        keys = self._elements if rel_ids is None else rel_ids
        return [self._elements[rel_id].get('Target') for rel_id in keys]

    def __contains__(self, rel_id: str) -> bool:
        return rel_id in self._elements

    def __len__(self) -> int:
        return len(self._elements)

    def save(self, path: Optional[str] = None) -> str:
        """Write the manifest back to its XML file."""
        return self.markup.serialize(path)

    def resolved_targets(self, source_part: str) -> List[str]:
        """
        Package paths of the internal targets, e.g. ``word/media/image1.png``.

        Args:
            source_part: Package path of the part that owns this manifest
        """
        base = posixpath.dirname(source_part)
        resolved = []
        for rel_id, element in self._elements.items():
            if self.is_external(rel_id):
                continue
            target = element.get('Target') or ''
            if target.startswith('/'):
                resolved.append(posixpath.normpath(target.lstrip('/')))
            else:
                resolved.append(posixpath.normpath(posixpath.join(base, target)))
        return resolved


def source_part_of(rels_part: str) -> str:
    """``word/_rels/header1.xml.rels`` -> ``word/header1.xml``; ``_rels/.rels`` -> ``''``."""
    rels_dir, name = posixpath.split(rels_part)
    return posixpath.join(posixpath.dirname(rels_dir), name[:-len('.rels')])


def package_references(package_dir: str, skip: Iterable[str] = ()) -> Set[str]:
    """
    Collect every part referenced by the ``*.rels`` files of an unpacked package.

    Args:
        package_dir: Root of the unpacked package
        skip: Package paths of relationship parts to leave out

    Returns:
        Package paths (forward slashes, no leading slash) of all internal targets
    """
    skipped = set(skip)
    referenced = set()
    for dirpath, _dirnames, filenames in os.walk(package_dir):
        if os.path.basename(dirpath) != '_rels':
            continue
        for filename in filenames:
            if not filename.endswith('.rels'):
                continue
            rels_part = os.path.relpath(os.path.join(dirpath, filename), package_dir).replace(os.sep, '/')
            if rels_part in skipped:
                continue
            manifest = RelationshipManifest.load(os.path.join(dirpath, filename))
            referenced.update(manifest.resolved_targets(source_part_of(rels_part)))
    return referenced
