class BatchRecognitionError(Exception):
    """Raised once per batch when any worker failed to recognize a chunk."""

    def __init__(self, message: str, ordinal: int | None = None) -> None:
        super().__init__(message)
        self.ordinal = ordinal
