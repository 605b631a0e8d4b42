from dataclasses import dataclass
from decimal import Decimal


@dataclass
class ExpenseRecordRow:
    """Represents a row from the expense_records table."""

    time: str
    type: str
    amount: Decimal
