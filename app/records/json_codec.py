"""JSON backup format: records grouped by ``YYYY-MM``, newest first."""

import json
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any

from app.extraction.timekeys import normalize_time
from app.records.exceptions import ImportParseError
from app.records.models import Category, Record


def sort_newest_first(records: Iterable[Record]) -> list[Record]:
    return sorted(records, key=lambda r: r.time, reverse=True)


def group_by_month(records: Iterable[Record]) -> dict[str, list[dict[str, object]]]:
    grouped: dict[str, list[dict[str, object]]] = {}
    for record in sort_newest_first(records):
        grouped.setdefault(record.month, []).append(record.to_dict())
    return grouped


def export_json(records: Iterable[Record]) -> str:
    return json.dumps(group_by_month(records), ensure_ascii=False, indent=2)


def import_json(content: str) -> list[Record]:
    """Parse a flat array or a month-grouped object of records.

    Items without a non-empty ``time`` or without an ``amount`` are skipped.

    Raises:
        ImportParseError: if the document is not valid JSON of either shape,
            or an amount is not a number.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ImportParseError(f"Invalid JSON: {exc}") from exc

    if isinstance(data, list):
        items = data
    elif isinstance(data, dict):
        items = []
        for month_items in data.values():
            if isinstance(month_items, list):
                items.extend(month_items)
    else:
        raise ImportParseError("JSON import must be an array or an object of arrays")

    records: list[Record] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ImportParseError(f"Item at index {index} must be an object")
        if not item.get("time") or "amount" not in item or item["amount"] is None:
            continue
        records.append(record_from_dict(item, index))
    return records


def record_from_dict(item: dict[str, Any], index: int = 0, *, normalize: bool = True) -> Record:
    """Build a Record from its serialized form, normalizing the time key unless told not to."""
    time = item.get("time")
    if not isinstance(time, str):
        raise ImportParseError(f"Item at index {index}: 'time' must be a string")
    amount = parse_amount(item.get("amount"))
    if amount is None:
        raise ImportParseError(f"Item at index {index}: 'amount' must be a number")
    return Record(
        time=normalize_time(time) if normalize else time,
        category=Category.from_label(item.get("type")),
        amount=amount,
    )


def parse_amount(raw: object) -> Decimal | None:
    """Parse a finite, non-negative amount; None when it is not one."""
    if isinstance(raw, bool) or raw is None:
        return None
    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount
