from collections.abc import Callable

from app.config.settings import Settings
from app.ocr.base import BaseRecognizer
from app.ocr.example_adapter import ExampleRecognizer
from app.ocr.tesseract_adapter import TesseractRecognizer

RecognizerFactoryFn = Callable[[], BaseRecognizer]


class RecognizerFactory:
    """Creates recognizers for the configured OCR engine."""

    ENGINES: tuple[str, ...] = ("tesseract", "example")

    @classmethod
    def create(cls, settings: Settings) -> BaseRecognizer:
        engine = cls._resolve_engine(settings)
        if engine == "example":
            return ExampleRecognizer()
        return TesseractRecognizer(
            languages=settings.ocr_languages,
            timeout_seconds=settings.tesseract_timeout_seconds,
            tesseract_cmd=settings.tesseract_cmd,
        )

    @classmethod
    def provider(cls, settings: Settings) -> RecognizerFactoryFn:
        """Return a zero-argument callable creating one recognizer per worker."""
        cls._resolve_engine(settings)
        return lambda: cls.create(settings)

    @classmethod
    def _resolve_engine(cls, settings: Settings) -> str:
        engine = settings.ocr_engine.lower()
        if engine not in cls.ENGINES:
            raise ValueError(f"Unknown OCR engine '{engine}'. Choose from: {list(cls.ENGINES)}")
        return engine
