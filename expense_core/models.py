"""Data models for the expense tracker domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict

__all__ = [
    "ALL",
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "Expense",
    "isoformat_utc",
    "month_key",
    "parse_datetime",
    "truncate_to_millis",
]

# Display order of the closed category set.
CATEGORIES = ("food", "travel", "bills", "entertainment", "shopping", "health", "other")
DEFAULT_CATEGORY = "food"

# Filter value matching every category or every month.
ALL = "all"


def isoformat_utc(dt: datetime) -> str:
    """Return an ISO 8601 string with millisecond precision and trailing Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    iso = dt.isoformat(timespec="milliseconds")
    # datetime.isoformat renders +00:00 for UTC; replace with the shorter Z form.
    return iso.replace("+00:00", "Z")


def parse_datetime(value: str) -> datetime:
    """Parse ISO 8601 datetime strings with optional trailing Z into UTC-aware datetime."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        # Naive timestamps are taken as UTC.
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def truncate_to_millis(dt: datetime) -> datetime:
    """Return a UTC-aware copy of ``dt`` at the precision stored in ``createdAt``."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=dt.microsecond // 1000 * 1000)


def month_key(day: date) -> str:
    """Return the ``YYYY-MM`` month prefix of a calendar date."""
    return day.isoformat()[:7]


@dataclass(frozen=True)
class Expense:
    id: int
    amount: Decimal
    date: date
    note: str
    category: str
    created_at: datetime

    @property
    def month(self) -> str:
        return month_key(self.date)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to JSON-friendly natives."""
        return {
            "id": self.id,
            "amount": str(self.amount),
            "date": self.date.isoformat(),
            "note": self.note,
            "category": self.category,
            "createdAt": isoformat_utc(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        """Hydrate an Expense from JSON-native data."""
        return cls(
            id=int(data["id"]),
            amount=Decimal(str(data["amount"])),
            date=date.fromisoformat(data["date"]),
            note=data["note"],
            category=data["category"],
            created_at=parse_datetime(data["createdAt"]),
        )
