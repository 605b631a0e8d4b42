import io
from collections.abc import Callable
from decimal import Decimal

import numpy as np
import pytest
from PIL import Image

from app.records.models import Category, Record

ImageFactory = Callable[..., Image.Image]


def _striped_image(
    height: int,
    width: int = 200,
    quiet_rows: dict[int, int] | None = None,
    stripe_width: int = 10,
) -> Image.Image:
    """White image whose rows look like text: columns alternate white/black.

    ``quiet_rows`` maps a row index to the contrast used on that row instead
    (0 makes the row perfectly blank).
    """
    quiet_rows = quiet_rows or {}
    dark_columns = (np.arange(width) // stripe_width) % 2 == 1
    pixels = np.full((height, width, 3), 255, dtype=np.uint8)
    for y in range(height):
        contrast = quiet_rows.get(y, 255)
        pixels[y, dark_columns, :] = 255 - contrast
    return Image.fromarray(pixels)


@pytest.fixture()
def striped_image() -> ImageFactory:
    return _striped_image


@pytest.fixture()
def png_bytes() -> Callable[[Image.Image], bytes]:
    def encode(image: Image.Image) -> bytes:
        buf = io.BytesIO()
        image.save(buf, format="PNG")
        return buf.getvalue()

    return encode


@pytest.fixture()
def sample_records() -> list[Record]:
    return [
        Record(time="2025-01-05 08:03:02", category=Category.WATER, amount=Decimal("12.50")),
        Record(time="2025-01-20 21:15:00", category=Category.BATH, amount=Decimal("3")),
        Record(time="2025-02-01 07:00:59", category=Category.LAUNDRY, amount=Decimal("4.2")),
        Record(time="2024-12-31 23:59:59", category=Category.OTHER, amount=Decimal("0.75")),
    ]
