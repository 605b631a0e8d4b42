class RecordImportError(Exception):
    """Base exception for record import/export failures."""


class ImportParseError(RecordImportError):
    """Raised when an import file cannot be parsed as a whole."""


class UnsupportedFormatError(RecordImportError):
    """Raised when an import/export format is not supported."""


class EmptyCollectionError(RecordImportError):
    """Raised when exporting a collection with no records."""
