from collections.abc import Iterable, Sequence

from app.records.models import Record


def filter_new(existing: Iterable[Record], items: Iterable[Record]) -> list[Record]:
    """Return the items whose time key is new, keeping the first of any repeats."""
    seen = {record.time for record in existing}
    fresh: list[Record] = []
    for item in items:
        if item.time in seen:
            continue
        seen.add(item.time)
        fresh.append(item)
    return fresh


def merge(existing: Sequence[Record], incoming: Iterable[Record]) -> list[Record]:
    """Append incoming records to the existing collection.

    Existing records are never replaced or removed; an incoming record whose
    key is already taken is dropped.
    """
    return [*existing, *filter_new(existing, incoming)]
