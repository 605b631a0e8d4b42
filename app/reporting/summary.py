"""Aggregations over the record collection used by the summary report."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from app.records.models import CHARTED_CATEGORIES, Category, Record, amount_to_number

HOURS = 24
NO_CATEGORY = "无"


class HourlyMode(str, Enum):
    COUNT = "count"
    AMOUNT = "amount"
    AVERAGE = "average"


@dataclass(frozen=True)
class TopCategory:
    name: str
    percent: int


def total_amount(records: Iterable[Record]) -> Decimal:
    return sum((r.amount for r in records), Decimal(0))


def daily_totals(records: Iterable[Record]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for record in records:
        totals[record.day] = totals.get(record.day, Decimal(0)) + record.amount
    return totals


def unique_months(records: Iterable[Record]) -> list[str]:
    return sorted({r.month for r in records})


def monthly_totals(records: Sequence[Record]) -> dict[str, Decimal]:
    totals = {month: Decimal(0) for month in unique_months(records)}
    for record in records:
        totals[record.month] += record.amount
    return totals


def monthly_average(records: Sequence[Record]) -> str:
    """Total divided by the number of distinct months, as a 2-decimal string."""
    months = unique_months(records)
    if not months:
        return "0.00"
    average = total_amount(records) / len(months)
    return str(average.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def top_category(records: Sequence[Record]) -> TopCategory:
    """Most frequent category by record count; on ties the later-seen one wins."""
    if not records:
        return TopCategory(name=NO_CATEGORY, percent=0)
    counts: dict[Category, int] = {}
    for record in records:
        counts[record.category] = counts.get(record.category, 0) + 1
    top = next(iter(counts))
    for category, count in counts.items():
        if count >= counts[top]:
            top = category
    percent = Decimal(counts[top] * 100) / len(records)
    return TopCategory(
        name=top.value,
        percent=int(percent.quantize(Decimal(1), rounding=ROUND_HALF_UP)),
    )


def category_totals(records: Iterable[Record]) -> dict[Category, Decimal]:
    totals = {category: Decimal(0) for category in CHARTED_CATEGORIES}
    for record in records:
        category = record.category if record.category in totals else Category.OTHER
        totals[category] += record.amount
    return totals


def hourly_buckets(
    records: Iterable[Record], mode: HourlyMode = HourlyMode.COUNT
) -> dict[Category, list[Decimal]]:
    """Per-category values for each hour of the day.

    ``count`` counts records, ``amount`` sums them and ``average`` divides the
    sum by the count of each bucket.
    """
    sums = {c: [Decimal(0)] * HOURS for c in CHARTED_CATEGORIES}
    counts = {c: [0] * HOURS for c in CHARTED_CATEGORIES}
    for record in records:
        category = record.category if record.category in sums else Category.OTHER
        hour = _hour_of(record)
        counts[category][hour] += 1
        sums[category][hour] += record.amount

    if mode is HourlyMode.COUNT:
        return {c: [Decimal(n) for n in counts[c]] for c in CHARTED_CATEGORIES}
    if mode is HourlyMode.AMOUNT:
        return sums
    return {
        c: [s / n if n else Decimal(0) for s, n in zip(sums[c], counts[c], strict=True)]
        for c in CHARTED_CATEGORIES
    }


def heatmap_days(
    records: Iterable[Record], today: date, days: int = 365
) -> list[tuple[str, Decimal]]:
    """Daily totals for the ``days`` days ending at ``today``, oldest first."""
    totals = daily_totals(records)
    result = []
    for offset in range(days - 1, -1, -1):
        day = (today - timedelta(days=offset)).isoformat()
        result.append((day, totals.get(day, Decimal(0))))
    return result


def max_daily_amount(records: Iterable[Record]) -> Decimal:
    """Largest single-day total; the heatmap scales its shades against it."""
    return max(daily_totals(records).values(), default=Decimal(0))


def build_summary(
    records: Sequence[Record],
    hourly_mode: HourlyMode = HourlyMode.COUNT,
    today: date | None = None,
) -> dict[str, object]:
    """JSON-ready overview of the collection.

    The heatmap covers the year ending at ``today`` (the current date by default).
    """
    top = top_category(records)
    heatmap = heatmap_days(records, today or date.today())
    return {
        "record_count": len(records),
        "total_amount": amount_to_number(total_amount(records)),
        "monthly_average": monthly_average(records),
        "top_category": {"name": top.name, "percent": top.percent},
        "monthly_totals": {
            month: amount_to_number(total) for month, total in monthly_totals(records).items()
        },
        "category_totals": {
            category.value: amount_to_number(total)
            for category, total in category_totals(records).items()
        },
        "hourly": {
            "mode": hourly_mode.value,
            "series": {
                category.value: [amount_to_number(v) for v in values]
                for category, values in hourly_buckets(records, hourly_mode).items()
            },
        },
        "heatmap": {
            "max_daily_amount": amount_to_number(max_daily_amount(records)),
            "days": [{"date": day, "amount": amount_to_number(total)} for day, total in heatmap],
        },
    }


def _hour_of(record: Record) -> int:
    clock = record.time.split(" ")[1] if " " in record.time else ""
    hour = clock.split(":")[0]
    if not hour.isdigit():
        return 0
    return min(int(hour), HOURS - 1)
