from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class Category(str, Enum):
    """Closed set of expense categories recognised on transaction logs."""

    WATER = "饮水"
    BATH = "洗浴"
    HAIR_DRYER = "吹风"
    LAUNDRY = "洗衣"
    PURCHASE = "消费"
    SHOPPING = "购物"
    OTHER = "其他"

    @classmethod
    def from_label(cls, label: str | None) -> "Category":
        """Map a stored or imported label to a category, falling back to OTHER."""
        if not label:
            return cls.OTHER
        try:
            return cls(label.strip())
        except ValueError:
            return cls.OTHER


# Categories with their own series in summaries; everything else folds into OTHER.
CHARTED_CATEGORIES: tuple[Category, ...] = (
    Category.WATER,
    Category.BATH,
    Category.HAIR_DRYER,
    Category.LAUNDRY,
    Category.OTHER,
)


@dataclass(frozen=True)
class Record:
    """A single expense transaction. ``time`` is the unique key of the collection."""

    time: str
    category: Category
    amount: Decimal

    @property
    def month(self) -> str:
        return self.time[:7]

    @property
    def day(self) -> str:
        return self.time.split(" ")[0]

    def to_dict(self) -> dict[str, object]:
        """Serialize using the field names of the export formats."""
        return {
            "time": self.time,
            "type": self.category.value,
            "amount": amount_to_number(self.amount),
        }


def amount_to_number(amount: Decimal) -> int | float:
    """Render an amount the way exported files have always shown it: 3, 12.5."""
    value = float(amount)
    if value.is_integer():
        return int(value)
    return value


def format_amount(amount: Decimal) -> str:
    return str(amount_to_number(amount))
