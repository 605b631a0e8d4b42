"""Splits tall transaction-log screenshots into recognizer-sized chunks.

Processing flow:
1. Decode the upload and convert it to RGB.
2. Walk down the image in steps of ``target_height``.
3. Unless the step reaches the bottom, scan a window below the naive boundary
   for the most uniform row and cut there instead, so no text line is sliced.
4. Encode every slice at native resolution as JPEG.
"""

import io

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageOps, UnidentifiedImageError

from app.config.settings import Settings
from app.logging.logger import Log
from app.segmentation.exceptions import ImageDecodeError
from app.segmentation.models import ImageChunk

PixelArray = NDArray[np.uint8]


def decode_image(raw: bytes) -> Image.Image:
    """Decode image bytes into an upright RGB image.

    Raises:
        ImageDecodeError: if the bytes are not a readable image.
    """
    try:
        with Image.open(io.BytesIO(raw)) as opened:
            opened.load()
            upright = ImageOps.exif_transpose(opened)
            return upright.convert("RGB")
    # Pillow reports some corrupt PNG chunks as SyntaxError.
    except (UnidentifiedImageError, OSError, SyntaxError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(f"Cannot decode image ({len(raw)} bytes): {exc}") from exc


class Segmenter:
    """Cuts an image into horizontal chunks at visually quiet rows."""

    def __init__(
        self,
        *,
        target_height: int = 4000,
        scan_range: int = 400,
        scan_stride: int = 5,
        sample_points: int = 20,
        blank_threshold: float = 10.0,
        jpeg_quality: int = 85,
        max_image_pixels: int | None = None,
    ) -> None:
        if target_height <= 0 or scan_range <= 0 or scan_stride <= 0 or sample_points <= 0:
            raise ValueError("Segmenter sizes must be positive")
        if max_image_pixels is not None:
            # Process-wide Pillow setting, read by decode_image.
            Image.MAX_IMAGE_PIXELS = max_image_pixels or None
        self._target_height = target_height
        self._scan_range = scan_range
        self._scan_stride = scan_stride
        self._sample_points = sample_points
        self._blank_threshold = blank_threshold
        self._jpeg_quality = jpeg_quality

    @classmethod
    def from_settings(cls, settings: Settings) -> "Segmenter":
        return cls(
            target_height=settings.segment_target_height,
            scan_range=settings.segment_scan_range,
            scan_stride=settings.segment_scan_stride,
            sample_points=settings.segment_sample_points,
            blank_threshold=settings.segment_blank_threshold,
            jpeg_quality=settings.chunk_jpeg_quality,
            max_image_pixels=settings.segment_max_image_pixels,
        )

    @property
    def max_chunk_height(self) -> int:
        return self._target_height + self._scan_range

    def segment(self, image: Image.Image, start_ordinal: int = 0) -> list[ImageChunk]:
        """Split ``image`` into chunks ordered top to bottom.

        Chunk ordinals start at ``start_ordinal`` so several images of one
        batch can share a single numbering.
        """
        rgb = image if image.mode == "RGB" else image.convert("RGB")
        pixels: PixelArray = np.asarray(rgb)
        boundaries = self.split_rows(pixels)

        chunks: list[ImageChunk] = []
        top = 0
        for offset, bottom in enumerate(boundaries):
            chunks.append(
                ImageChunk(
                    ordinal=start_ordinal + offset,
                    top=top,
                    height=bottom - top,
                    data=self._encode(rgb.crop((0, top, rgb.width, bottom))),
                )
            )
            top = bottom
        Log.debug(f"Segmented {rgb.width}x{rgb.height} image into {len(chunks)} chunks")
        return chunks

    def split_rows(self, pixels: PixelArray) -> list[int]:
        """Return the bottom row (exclusive) of every chunk."""
        total_height = pixels.shape[0]
        boundaries: list[int] = []
        current_y = 0
        while current_y < total_height:
            next_y = min(current_y + self._target_height, total_height)
            if next_y < total_height:
                next_y = self.find_split_row(pixels, next_y)
            boundaries.append(next_y)
            current_y = next_y
        return boundaries

    def find_split_row(self, pixels: PixelArray, start_y: int) -> int:
        """Pick the most uniform sampled row at or below ``start_y``.

        Rows are sampled every ``scan_stride`` rows over ``scan_range`` rows.
        The first row scoring below ``blank_threshold`` wins outright;
        otherwise the lowest score wins, the earliest row on ties.
        """
        columns = self.sample_columns(pixels.shape[1])
        best_y = start_y
        min_score = float("inf")
        for y in self.sampled_rows(pixels, start_y):
            score = row_score(pixels, y, columns)
            if score < min_score:
                min_score = score
                best_y = y
            if score < self._blank_threshold:
                return y
        return best_y

    def sampled_rows(self, pixels: PixelArray, start_y: int) -> list[int]:
        """Rows ``find_split_row`` would consider for a window at ``start_y``."""
        window = min(self._scan_range, pixels.shape[0] - start_y)
        return list(range(start_y, start_y + window, self._scan_stride))

    def sample_columns(self, width: int) -> NDArray[np.intp]:
        """Evenly spaced columns sampled on every scanned row."""
        step = max(1, width // self._sample_points)
        return np.arange(0, width, step)[: self._sample_points]

    def _encode(self, chunk: Image.Image) -> bytes:
        buf = io.BytesIO()
        chunk.save(buf, format="JPEG", quality=self._jpeg_quality)
        return buf.getvalue()


def row_score(pixels: PixelArray, row: int, columns: NDArray[np.intp]) -> float:
    """Sum over sampled pixels of the absolute deviation of each channel from
    the row's channel mean. Lower is more uniform."""
    samples = pixels[row, columns, :3].astype(np.float64)
    return float(np.abs(samples - samples.mean(axis=0)).sum())
