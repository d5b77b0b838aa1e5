"""Exception types raised by the model and file operations."""


class MindMapError(Exception):
    """Base class for mind map errors."""


class ExportError(MindMapError):
    """Raised when an export cannot be produced (empty graph, unknown format)."""


class ImportFormatError(MindMapError, ValueError):
    """Raised when an imported file is not a mind map document."""
