from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from expense_core.models import Expense
from expense_core.validators import (
    AMOUNT_ERROR,
    CATEGORY_ERROR,
    DATE_ERROR,
    DATE_FORMAT_ERROR,
    NOTE_ERROR,
    blank_draft,
    draft_from_expense,
    validate,
)


def _draft(**overrides):
    draft = {"amount": "12.50", "date": "2024-03-01", "note": "Lunch", "category": "food"}
    draft.update(overrides)
    return draft


def test_valid_draft_is_cleaned():
    result = validate(_draft(note="  Lunch  ", category=" Food "))

    assert result.valid
    assert result.errors == {}
    assert result.cleaned == {
        "amount": Decimal("12.50"),
        "date": date(2024, 3, 1),
        "note": "Lunch",
        "category": "food",
    }


@pytest.mark.parametrize("amount", [None, "", "   ", "abc", "0", 0, -5, "-0.01", True, "NaN", "Infinity", [1]])
def test_bad_amounts_are_rejected(amount):
    result = validate(_draft(amount=amount))

    assert not result.valid
    assert result.errors == {"amount": AMOUNT_ERROR}
    assert result.cleaned is None


def test_numeric_amounts_are_accepted():
    assert validate(_draft(amount=7)).cleaned["amount"] == Decimal("7")
    assert validate(_draft(amount=0.1)).cleaned["amount"] == Decimal("0.1")


def test_missing_amount_key_is_an_error():
    draft = _draft()
    del draft["amount"]

    assert validate(draft).errors == {"amount": AMOUNT_ERROR}


@pytest.mark.parametrize("value", [None, "", "  "])
def test_date_is_required(value):
    assert validate(_draft(date=value)).errors == {"date": DATE_ERROR}


@pytest.mark.parametrize("value", ["2024-13-01", "2024-02-30", "01/03/2024", "20240301", 20240301])
def test_unparseable_date_is_rejected(value):
    assert validate(_draft(date=value)).errors == {"date": DATE_FORMAT_ERROR}


def test_date_objects_are_accepted():
    result = validate(_draft(date=datetime(2024, 3, 1, 18, 0)))

    assert result.cleaned["date"] == date(2024, 3, 1)


@pytest.mark.parametrize("note", [None, "", "   \t"])
def test_note_is_required(note):
    assert validate(_draft(note=note)).errors == {"note": NOTE_ERROR}


def test_unknown_category_is_rejected_not_reclassified():
    result = validate(_draft(category="groceries"))

    assert result.errors == {"category": CATEGORY_ERROR}


def test_missing_category_defaults_to_food():
    draft = _draft()
    del draft["category"]

    assert validate(draft).cleaned["category"] == "food"


def test_all_errors_are_collected():
    result = validate({"amount": "0", "date": "", "note": " ", "category": "nope"})

    assert set(result.errors) == {"amount", "date", "note", "category"}


def test_validate_does_not_mutate_the_draft():
    draft = _draft(note="  padded  ")
    snapshot = dict(draft)

    validate(draft)

    assert draft == snapshot


def test_blank_draft_uses_today_and_food():
    assert blank_draft(date(2024, 5, 6)) == {
        "amount": "",
        "date": "2024-05-06",
        "note": "",
        "category": "food",
    }


def test_draft_from_expense_round_trips_through_validate():
    expense = Expense(
        id=1,
        amount=Decimal("9.99"),
        date=date(2024, 1, 31),
        note="Book",
        category="shopping",
        created_at=datetime(2024, 1, 31, tzinfo=timezone.utc),
    )

    draft = draft_from_expense(expense)
    result = validate(draft)

    assert draft == {"amount": "9.99", "date": "2024-01-31", "note": "Book", "category": "shopping"}
    assert result.cleaned == {
        "amount": expense.amount,
        "date": expense.date,
        "note": expense.note,
        "category": expense.category,
    }
