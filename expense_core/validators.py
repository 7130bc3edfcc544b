"""Validation of expense drafts before they are committed to the store."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

from .models import CATEGORIES, DEFAULT_CATEGORY, Expense

__all__ = [
    "AMOUNT_ERROR",
    "CATEGORY_ERROR",
    "DATE_ERROR",
    "DATE_FORMAT_ERROR",
    "NOTE_ERROR",
    "ValidationResult",
    "blank_draft",
    "draft_from_expense",
    "parse_iso_date",
    "validate",
]

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

AMOUNT_ERROR = "Amount must be greater than 0"
DATE_ERROR = "Date is required"
DATE_FORMAT_ERROR = "Date must be a valid date (YYYY-MM-DD)"
NOTE_ERROR = "Note is required"
CATEGORY_ERROR = f"Category must be one of: {', '.join(CATEGORIES)}"


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: Dict[str, str] = field(default_factory=dict)
    # Normalised field values, present only when the draft is valid.
    cleaned: Optional[Dict[str, Any]] = None


def _parse_amount(raw: object) -> Optional[Decimal]:
    """Return a positive finite Decimal, or None when the input does not qualify."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        amount = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def parse_iso_date(raw: object) -> Optional[date]:
    """Parse a strict ``YYYY-MM-DD`` string (or pass a date through)."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or not DATE_PATTERN.fullmatch(raw.strip()):
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        return None


def validate(draft: Mapping[str, Any]) -> ValidationResult:
    """Check a draft against every rule and collect all errors.

    Pure: the draft is never modified and nothing is committed.
    """
    errors: Dict[str, str] = {}

    amount = _parse_amount(draft.get("amount"))
    if amount is None:
        errors["amount"] = AMOUNT_ERROR

    raw_date = draft.get("date")
    day: Optional[date] = None
    if raw_date is None or (isinstance(raw_date, str) and not raw_date.strip()):
        errors["date"] = DATE_ERROR
    else:
        day = parse_iso_date(raw_date)
        if day is None:
            errors["date"] = DATE_FORMAT_ERROR

    raw_note = draft.get("note")
    note = raw_note.strip() if isinstance(raw_note, str) else ""
    if not note:
        errors["note"] = NOTE_ERROR

    raw_category = draft.get("category")
    if raw_category is None:
        category = DEFAULT_CATEGORY
    elif isinstance(raw_category, str):
        category = raw_category.strip().lower()
    else:
        category = ""
    if category not in CATEGORIES:
        errors["category"] = CATEGORY_ERROR

    if errors:
        return ValidationResult(valid=False, errors=errors)
    return ValidationResult(
        valid=True,
        cleaned={"amount": amount, "date": day, "note": note, "category": category},
    )


def blank_draft(today: Optional[date] = None) -> Dict[str, str]:
    """Return the draft an empty entry form starts from."""
    today = today or date.today()
    return {
        "amount": "",
        "date": today.isoformat(),
        "note": "",
        "category": DEFAULT_CATEGORY,
    }


def draft_from_expense(expense: Expense) -> Dict[str, str]:
    """Return a draft pre-filled from an existing record, ready for editing."""
    return {
        "amount": str(expense.amount),
        "date": expense.date.isoformat(),
        "note": expense.note,
        "category": expense.category,
    }
