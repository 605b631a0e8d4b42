"""Turns recognized transaction-log text into expense records.

Recognized text interleaves the timestamp, category and amount of one
transaction across neighbouring lines in no fixed order, so each timestamp line
is read together with the two lines above it.
"""

import re
from decimal import Decimal
from typing import ClassVar

from app.extraction.known_timestamps import KnownTimestamps
from app.extraction.timekeys import TIMESTAMP_RE, time_key_from_match
from app.logging.logger import Log
from app.records.models import Category, Record


class RecordExtractor:
    """Finds record-shaped lines and resolves amount and category from context."""

    CONTEXT_LINES: ClassVar[int] = 3

    _LINE_SPLIT_RE: ClassVar[re.Pattern[str]] = re.compile(r"\n+")
    _AMOUNT_RE: ClassVar[re.Pattern[str]] = re.compile(r"-(?P<amount>\d+\.\d+)")
    _CATEGORY_RE: ClassVar[re.Pattern[str]] = re.compile(
        "(?P<category>"
        + "|".join(re.escape(c.value) for c in Category if c is not Category.OTHER)
        + ")"
    )

    def extract(self, text: str, known: KnownTimestamps) -> list[Record]:
        """Extract records whose time key is not yet in ``known``.

        Every accepted key is added to ``known`` so later calls in the same
        batch, from any worker, cannot emit it again.
        """
        lines = [line.strip() for line in self._LINE_SPLIT_RE.split(text)]
        lines = [line for line in lines if line]
        records: list[Record] = []

        for index, line in enumerate(lines):
            match = TIMESTAMP_RE.search(line)
            if match is None:
                continue
            key = time_key_from_match(match)
            if key in known:
                continue

            context = " ".join(
                lines[i] for i in range(index, max(-1, index - self.CONTEXT_LINES), -1)
            )
            amount_match = self._AMOUNT_RE.search(context)
            if amount_match is None:
                Log.debug(f"No amount near {key}, skipping line")
                continue
            category_match = self._CATEGORY_RE.search(context)
            category = (
                Category(category_match["category"]) if category_match else Category.OTHER
            )

            if not known.add_if_absent(key):
                continue
            records.append(
                Record(time=key, category=category, amount=Decimal(amount_match["amount"]))
            )

        return records
