import io

import pytesseract
from PIL import Image, UnidentifiedImageError

from app.ocr.base import BaseRecognizer
from app.ocr.exceptions import RecognitionError, RecognizerClosedError
from app.ocr.models import ProgressCallback
from app.segmentation.models import ImageChunk


class TesseractRecognizer(BaseRecognizer):
    """Recognizes chunk text with the Tesseract engine through pytesseract."""

    def __init__(
        self,
        *,
        languages: str,
        timeout_seconds: int = 0,
        tesseract_cmd: str = "",
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self._languages = languages
        self._timeout_seconds = timeout_seconds
        self._closed = False

    def recognize(self, chunk: ImageChunk, on_progress: ProgressCallback | None = None) -> str:
        if self._closed:
            raise RecognizerClosedError("Recognizer already closed")
        if on_progress is not None:
            on_progress(0.0)
        try:
            with Image.open(io.BytesIO(chunk.data)) as image:
                text = pytesseract.image_to_string(
                    image,
                    lang=self._languages,
                    timeout=self._timeout_seconds,
                )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            raise RecognitionError(f"Tesseract failed on chunk {chunk.ordinal}: {exc}") from exc
        except (UnidentifiedImageError, OSError) as exc:
            raise RecognitionError(f"Chunk {chunk.ordinal} is not a readable image: {exc}") from exc
        except RuntimeError as exc:
            # pytesseract signals its timeout with a bare RuntimeError.
            raise RecognitionError(f"Tesseract timed out on chunk {chunk.ordinal}: {exc}") from exc
        if on_progress is not None:
            on_progress(1.0)
        return str(text)

    def close(self) -> None:
        self._closed = True
