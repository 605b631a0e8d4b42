class StorageError(Exception):
    """Raised when the record store cannot be read or written."""
