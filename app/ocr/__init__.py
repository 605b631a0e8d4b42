from app.ocr.base import BaseRecognizer
from app.ocr.factory import RecognizerFactory
from app.ocr.tesseract_adapter import TesseractRecognizer

__all__ = ["BaseRecognizer", "RecognizerFactory", "TesseractRecognizer"]
