from pathlib import Path
from typing import ClassVar

from app.processor.exceptions import UnsupportedImageTypeError


class FileLoader:
    """Reads uploaded image files from disk."""

    SUPPORTED_SUFFIXES: ClassVar[frozenset[str]] = frozenset(
        {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".gif", ".tif", ".tiff"}
    )

    def load(self, path: Path) -> bytes:
        """Read image bytes from disk.

        Raises:
            UnsupportedImageTypeError: if the extension is not an image type.
            FileNotFoundError: if the file does not exist.
        """
        if path.suffix.lower() not in self.SUPPORTED_SUFFIXES:
            raise UnsupportedImageTypeError(
                f"'{path.name}' is not a supported image type"
            )
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return path.read_bytes()
