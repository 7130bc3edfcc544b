"""Display helpers for amounts, categories and months."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from .validators import parse_iso_date

__all__ = ["category_label", "format_money", "month_label"]


def format_money(amount: Decimal, symbol: str = "$") -> str:
    """Render an amount with two decimal places, e.g. ``$1,234.50``."""
    rounded = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{symbol}{rounded:,.2f}"


def category_label(category: str) -> str:
    return category[:1].upper() + category[1:]


def month_label(month: str) -> str:
    """Turn a ``YYYY-MM`` prefix into ``March 2024``."""
    day = parse_iso_date(f"{month}-01")
    if day is None:
        return month
    return f"{_MONTH_NAMES[day.month - 1]} {day.year}"


_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
