from abc import ABC, abstractmethod

from app.ocr.models import ProgressCallback
from app.segmentation.models import ImageChunk


class BaseRecognizer(ABC):
    """Contract for all text recognition adapters.

    One instance serves one scheduler worker, one chunk at a time, and is
    closed exactly once when the batch is over.
    """

    @abstractmethod
    def recognize(self, chunk: ImageChunk, on_progress: ProgressCallback | None = None) -> str:
        """Recognize the text of an encoded image chunk.

        Args:
            chunk: Encoded image fragment.
            on_progress: Optional callback receiving fractions in [0, 1]
                while the chunk is being recognized.

        Returns:
            Recognized text, possibly multi-line and noisy.

        Raises:
            RecognitionError: on any engine failure.
        """

    def close(self) -> None:
        """Release engine resources held by this recognizer."""
