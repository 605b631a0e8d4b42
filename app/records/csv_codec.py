"""Spreadsheet-friendly CSV format: ``Time,Type,Amount`` with a UTF-8 BOM."""

import csv
import re
from collections.abc import Iterable

from app.extraction.timekeys import DATE_PREFIX_RE, normalize_time
from app.logging.logger import Log
from app.records.json_codec import parse_amount, sort_newest_first
from app.records.models import Category, Record, format_amount

BOM = "\ufeff"
HEADER = "Time,Type,Amount"

_LINE_BREAK_RE = re.compile(r"\r\n|\n|\r")


def export_csv(records: Iterable[Record]) -> str:
    lines = [HEADER]
    for record in sort_newest_first(records):
        lines.append(f"{record.time},{record.category.value},{format_amount(record.amount)}")
    return BOM + "\n".join(lines) + "\n"


def import_csv(content: str) -> list[Record]:
    """Parse CSV rows, skipping any row that is not a valid record.

    A row is kept when its first field starts with a date and its third field
    is a number; a comma inside the amount is read as the decimal separator.
    """
    if content.startswith(BOM):
        content = content[1:]

    records: list[Record] = []
    lines = _LINE_BREAK_RE.split(content)
    for row_number, row in enumerate(csv.reader(lines), start=1):
        fields = [_unquote(field) for field in row]
        if len(fields) < 3:
            continue
        time, label, amount_text = fields[0], fields[1], fields[2]
        amount = parse_amount(amount_text.replace(",", ".", 1))
        if not DATE_PREFIX_RE.match(time) or amount is None:
            Log.debug(f"Skipping CSV row {row_number}: {row!r}")
            continue
        records.append(
            Record(
                time=normalize_time(time),
                category=Category.from_label(label),
                amount=amount,
            )
        )
    return records


def _unquote(field: str) -> str:
    field = field.strip()
    if field[:1] in ("'", '"'):
        field = field[1:]
    if field[-1:] in ("'", '"'):
        field = field[:-1]
    return field
