"""Example recognizer adapter.

Use this module as a reference when implementing new recognizer adapters.
Implement BaseRecognizer and register the engine in RecognizerFactory.
"""

from typing import ClassVar

from app.ocr.base import BaseRecognizer
from app.ocr.exceptions import RecognizerClosedError
from app.ocr.models import ProgressCallback
from app.segmentation.models import ImageChunk


class ExampleRecognizer(BaseRecognizer):
    """Example adapter that returns a fixed transaction-log text for every chunk.

    No engine calls. Useful for local development, tests, and as a template
    for real engine adapters.
    """

    DEFAULT_TEXT: ClassVar[str] = "饮水\n-1.50\n2025-01-05 08:03:02\n余额 23.10"

    def __init__(self, text: str | None = None) -> None:
        self._text = self.DEFAULT_TEXT if text is None else text
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def recognize(self, chunk: ImageChunk, on_progress: ProgressCallback | None = None) -> str:
        _ = chunk
        if self._closed:
            raise RecognizerClosedError("Recognizer already closed")
        if on_progress is not None:
            on_progress(0.5)
            on_progress(1.0)
        return self._text

    def close(self) -> None:
        self._closed = True
