from dataclasses import dataclass


@dataclass(frozen=True)
class ImageChunk:
    """An encoded horizontal slice of a source image, queued for recognition."""

    ordinal: int
    top: int
    height: int
    data: bytes
    mime_type: str = "image/jpeg"

    @property
    def bottom(self) -> int:
        return self.top + self.height
