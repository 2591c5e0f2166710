"""
Exceptions raised by the pew pipeline.
"""


class PewError(Exception):
    """Base exception for pew errors."""


class InvalidRootError(PewError):
    """Raised when the directory to dump is missing or cannot be listed."""


class ConfigFileError(PewError):
    """Raised when the ``.pewc`` rules file exists but cannot be read."""


class OutputError(PewError):
    """Raised when the markdown document cannot be written."""


class FileReadError(PewError):
    """Raised when a file's contents cannot be captured."""
