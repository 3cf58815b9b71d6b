"""
Exception types raised by the report assembler.

Filesystem failures are not wrapped: they surface as the built-in ``OSError``.
"""


class ReportAssemblerError(Exception):
    """Base class for all assembler failures."""


class ContainerFormatError(ReportAssemblerError):
    """The archive is missing, unreadable or not a valid zip package."""


class MalformedMarkupError(ReportAssemblerError):
    """An XML part could not be parsed."""


class StructureError(ReportAssemblerError):
    """An expected element or placeholder is absent from the template."""


class DuplicateIdError(ReportAssemblerError):
    """A relationship id is already present in the manifest."""


class EntryError(ReportAssemblerError):
    """Processing a single report entry failed.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, index: int, error: Exception):
        self.index = index
        self.error = error
        super().__init__(f"Entry #{index}: {error}")
