from collections.abc import Callable
from dataclasses import dataclass

ProgressCallback = Callable[[float], None]


@dataclass(frozen=True)
class RecognitionOutcome:
    """Recognized text of one chunk."""

    ordinal: int
    text: str
