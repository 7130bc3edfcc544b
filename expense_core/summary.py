"""Summary aggregation over a filtered view of expenses."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable

from .models import Expense

__all__ = ["Summary", "summarize"]


@dataclass(frozen=True)
class Summary:
    total: Decimal = Decimal("0")
    count: int = 0
    by_category: Dict[str, Decimal] = field(default_factory=dict)
    by_month: Dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        """Serialise with full-precision amounts as strings."""
        return {
            "total": str(self.total),
            "count": self.count,
            "byCategory": {key: str(value) for key, value in self.by_category.items()},
            "byMonth": {key: str(value) for key, value in self.by_month.items()},
        }


def summarize(records: Iterable[Expense]) -> Summary:
    """Reduce records to totals in one left-to-right pass.

    Keys appear in order of first occurrence and only for categories or
    months present in ``records``. No rounding is applied.
    """
    total = Decimal("0")
    count = 0
    by_category: Dict[str, Decimal] = {}
    by_month: Dict[str, Decimal] = {}
    for expense in records:
        total += expense.amount
        count += 1
        by_category[expense.category] = by_category.get(expense.category, Decimal("0")) + expense.amount
        by_month[expense.month] = by_month.get(expense.month, Decimal("0")) + expense.amount
    return Summary(total=total, count=count, by_category=by_category, by_month=by_month)
