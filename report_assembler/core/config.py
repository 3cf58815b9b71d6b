"""
Configuration constants for the report assembler.
"""

from docx.opc.constants import RELATIONSHIP_TYPE as RT


class Config:
    """Static configuration shared by every assembler component."""

    __version__ = "1.0.0"

    # Placeholder tokens recognized inside the template block (exact text-node match)
    HEADER_TOKEN = "{{HEADER}}"
    DESCRIPTION_TOKEN = "{{DESCRIPTION}}"

    # Package part locations, relative to the working tree root
    DOCUMENT_PART = "word/document.xml"
    RELATIONSHIPS_PART = "word/_rels/document.xml.rels"
    CONTENT_TYPES_PART = "[Content_Types].xml"
    MEDIA_DIR = "word/media"

    # Relationship targets are relative to the document part's directory
    MEDIA_TARGET_PREFIX = "media/"
    MEDIA_NAME_PREFIX = "image"

    IMAGE_RELATIONSHIP_TYPE = RT.IMAGE

    # Reference ids are REL_ID_PREFIX + counter; counter never starts below REL_ID_START
    REL_ID_PREFIX = "rId"
    REL_ID_START = 10

    NAMESPACES = {
        'w': 'http://schemas.openxmlformats.org/wordprocessingml/2006/main',
        'r': 'http://schemas.openxmlformats.org/officeDocument/2006/relationships',
        'a': 'http://schemas.openxmlformats.org/drawingml/2006/main',
        'wp': 'http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing',
        'pic': 'http://schemas.openxmlformats.org/drawingml/2006/picture',
        'rel': 'http://schemas.openxmlformats.org/package/2006/relationships',
        'ct': 'http://schemas.openxmlformats.org/package/2006/content-types',
    }

    SUPPORTED_TEMPLATE_EXTENSIONS = ['.docx']
    SUPPORTED_IMAGE_EXTENSIONS = ['.png', '.jpg', '.jpeg', '.gif', '.bmp', '.tif', '.tiff']

    IMAGE_CONTENT_TYPES = {
        'png': 'image/png',
        'jpg': 'image/jpeg',
        'jpeg': 'image/jpeg',
        'gif': 'image/gif',
        'bmp': 'image/bmp',
        'tif': 'image/tiff',
        'tiff': 'image/tiff',
    }

    # Rescale each drawing to the embedded image's aspect ratio inside the template's box
    FIT_IMAGE_TO_PLACEHOLDER = True

    # Drop template sample images whose relationships are no longer referenced by the body
    PRUNE_UNUSED_IMAGES = True

    WORK_DIR_PREFIX = "report_assembler_"

    @classmethod
    def get_rel_id(cls, counter: int) -> str:
        """Build a relationship id from its numeric counter."""
        return f"{cls.REL_ID_PREFIX}{counter}"

    @classmethod
    def get_media_name(cls, counter: int, extension: str) -> str:
        """Build the media file name for an image, e.g. ``image10.png``."""
        return f"{cls.MEDIA_NAME_PREFIX}{counter}{extension.lower()}"

    @classmethod
    def get_content_type(cls, extension: str) -> str:
        """Return the MIME type registered for an image extension."""
        return cls.IMAGE_CONTENT_TYPES.get(extension.lower().lstrip('.'), 'application/octet-stream')
