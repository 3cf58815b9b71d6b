"""
Report Assembler - builds multi-page DOCX reports from a single-page template.

Each report entry (header, description, image) becomes one page cloned from
the first block of the template body, followed by a page break.
"""

__version__ = "1.0.0"
__author__ = "Report Assembler Team"

from .core.assembler import TemplateAssembler, generate
from .core.config import Config
from .core.exceptions import (ContainerFormatError, DuplicateIdError, EntryError,
                              MalformedMarkupError, ReportAssemblerError, StructureError)
from .core.models import ReportEntry

__all__ = [
    'TemplateAssembler', 'generate', 'Config', 'ReportEntry',
    'ReportAssemblerError', 'ContainerFormatError', 'MalformedMarkupError',
    'StructureError', 'DuplicateIdError', 'EntryError',
]
