class RecognitionError(Exception):
    """Raised when the recognizer fails on a chunk."""


class RecognizerClosedError(RecognitionError):
    """Raised when a recognizer is used after it was closed."""
