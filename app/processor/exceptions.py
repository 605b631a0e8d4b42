class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class UnsupportedImageTypeError(ProcessorError):
    """Raised when an input file does not have a supported image extension."""
