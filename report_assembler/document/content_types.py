"""
Package content type registry (``[Content_Types].xml``).
"""

from typing import Optional

from lxml import etree

from ..core.config import Config
from ..core.exceptions import MalformedMarkupError
from .markup_tree import MarkupTree

CT_NS = Config.NAMESPACES['ct']
TYPES_TAG = f'{{{CT_NS}}}Types'
DEFAULT_TAG = f'{{{CT_NS}}}Default'


class ContentTypes:
    """Extension-level content type defaults of a package."""

    def __init__(self, markup: MarkupTree):
        self.markup = markup

    @classmethod
    def load(cls, path: str) -> 'ContentTypes':
        markup = MarkupTree.parse(path)
        if markup.root.tag != TYPES_TAG:
            raise MalformedMarkupError(f"Unexpected root element {markup.root.tag} in {path}")
        return cls(markup)

    def get_default(self, extension: str) -> Optional[str]:
        extension = extension.lower().lstrip('.')
        for element in self.markup.root.iter(DEFAULT_TAG):
            if (element.get('Extension') or '').lower() == extension:
                return element.get('ContentType')
        return None

    def ensure_default(self, extension: str, content_type: str) -> bool:
        """
        Register ``content_type`` for an extension unless one is already declared.

        Returns:
            True if a new ``Default`` element was added
        """
        if self.get_default(extension) is not None:
            return False
        element = etree.SubElement(self.markup.root, DEFAULT_TAG)
        element.set('Extension', extension.lower().lstrip('.'))
        element.set('ContentType', content_type)
        return True

    def save(self, path: Optional[str] = None) -> str:
        return self.markup.serialize(path)
