"""Filtering of expense records by category and month."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Union

from .exceptions import ValidationError
from .models import ALL, CATEGORIES, Expense

__all__ = ["FilterCriteria", "available_months", "filter_expenses"]

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


@dataclass(frozen=True)
class FilterCriteria:
    category: str = ALL
    month: str = ALL

    def __post_init__(self) -> None:
        category = (self.category or ALL).strip().lower()
        month = (self.month or ALL).strip().lower()
        if category != ALL and category not in CATEGORIES:
            raise ValidationError(
                f"category must be '{ALL}' or one of: {', '.join(CATEGORIES)}",
                {"category": "Unknown category"},
            )
        if month != ALL and not MONTH_PATTERN.fullmatch(month):
            raise ValidationError(
                f"month must be '{ALL}' or YYYY-MM", {"month": "Invalid month"}
            )
        # Frozen dataclass: normalised values go through object.__setattr__.
        object.__setattr__(self, "category", category)
        object.__setattr__(self, "month", month)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> "FilterCriteria":
        """Build criteria from loose input, treating missing or blank values as 'all'."""
        return cls(
            category=str(raw.get("category") or ALL),
            month=str(raw.get("month") or ALL),
        )


CriteriaLike = Union[FilterCriteria, Mapping[str, object]]


def filter_expenses(records: Iterable[Expense], criteria: CriteriaLike) -> List[Expense]:
    """Return the records matching both criteria, in their input order."""
    if not isinstance(criteria, FilterCriteria):
        criteria = FilterCriteria.from_mapping(criteria)

    def matches(expense: Expense) -> bool:
        if criteria.category != ALL and expense.category != criteria.category:
            return False
        if criteria.month != ALL and expense.month != criteria.month:
            return False
        return True

    return [expense for expense in records if matches(expense)]


def available_months(records: Iterable[Expense]) -> List[str]:
    """Distinct month prefixes, newest first."""
    return sorted({expense.month for expense in records}, reverse=True)
