"""
Mutable XML tree over a single package part.
"""

import copy
from typing import Iterator, Optional

from docx.oxml.ns import qn
from lxml import etree

from ..core.exceptions import MalformedMarkupError
from ..utils.logging_config import get_module_logger

XML_SPACE = '{http://www.w3.org/XML/1998/namespace}space'


def _qualify(name: str) -> str:
    """Turn ``w:t`` into Clark notation; names already qualified or unprefixed pass through."""
    if name.startswith('{') or ':' not in name:
        return name
    return qn(name)


class MarkupTree:
    """Parsed XML part bound to the file it was loaded from."""

    def __init__(self, tree: etree._ElementTree, path: Optional[str] = None):
        self.tree = tree
        self.path = path
        self.logger = get_module_logger(__name__)

    @classmethod
    def parse(cls, path: str) -> 'MarkupTree':
        """
        Load an XML file into a tree.

        Raises:
            MalformedMarkupError: If the file is missing or is not well-formed XML
        """
        parser = etree.XMLParser(remove_blank_text=False, resolve_entities=False)
        try:
            with open(path, 'rb') as f:
                tree = etree.parse(f, parser)
        except etree.XMLSyntaxError as e:
            raise MalformedMarkupError(f"Invalid XML in {path}: {e}") from e
        except OSError as e:
            raise MalformedMarkupError(f"Cannot read XML part {path}: {e}") from e
        return cls(tree, path)

    @property
    def root(self) -> etree._Element:
        return self.tree.getroot()

    def find(self, name: str, node: Optional[etree._Element] = None) -> Optional[etree._Element]:
        """Return the first descendant (or self) of ``node`` with the given tag, or None."""
        start = self.root if node is None else node
        return next(start.iter(_qualify(name)), None)

    @staticmethod
    def clone(node: etree._Element) -> etree._Element:
        """Deep copy of ``node``, detached from its tree and sharing nothing with it."""
        return copy.deepcopy(node)

    @staticmethod
    def find_text(node: etree._Element, literal: str, tag: str = 'w:t') -> Iterator[etree._Element]:
        """
        Yield text elements under ``node`` whose whole content equals ``literal``.

        Matching is exact and case-sensitive: a token split across sibling runs,
        or surrounded by other text in the same run, is not found.
        """
        for element in node.iter(_qualify(tag)):
            if element.text == literal:
                yield element

    @staticmethod
    def set_text(node: etree._Element, text: str) -> None:
        node.text = text
        # Leading/trailing whitespace is dropped by consumers unless preserved
        if text != text.strip():
            node.set(XML_SPACE, 'preserve')
        elif XML_SPACE in node.attrib:
            del node.attrib[XML_SPACE]

    @staticmethod
    def get_attribute(node: etree._Element, name: str) -> Optional[str]:
        return node.get(_qualify(name))

    @staticmethod
    def set_attribute(node: etree._Element, name: str, value: str) -> None:
        node.set(_qualify(name), value)

    def replace_text(self, node: etree._Element, literal: str, value: str) -> int:
        """
        Substitute every exact occurrence of ``literal`` under ``node``.

        Returns:
            Number of text elements replaced
        """
        matches = list(self.find_text(node, literal))
        for element in matches:
            self.set_text(element, value)
        return len(matches)

    def to_bytes(self) -> bytes:
        return etree.tostring(self.tree, xml_declaration=True, encoding='UTF-8', standalone=True)

    def serialize(self, path: Optional[str] = None) -> str:
        """
        Write the tree back to disk.

        Args:
            path: Destination, defaults to the file the tree was parsed from

        Returns:
            The path written

        Raises:
            OSError: If the file cannot be written
        """
        target = path or self.path
        if target is None:
            raise ValueError("No destination path for markup tree")
        with open(target, 'wb') as f:
            f.write(self.to_bytes())
        self.logger.debug("  > Wrote %s", target)
        return target
