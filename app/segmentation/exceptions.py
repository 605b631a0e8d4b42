class SegmentationError(Exception):
    """Base exception for all segmentation errors."""


class ImageDecodeError(SegmentationError):
    """Raised when input bytes cannot be decoded as an image."""
