import json
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from expense_core.exceptions import PersistenceWarning
from expense_core.models import Expense
from expense_core.storage import ExpenseRepository, JSONFileBlobStore, MemoryBlobStore


def _expense(expense_id, amount, day, note="Note", category="food"):
    return Expense(
        id=expense_id,
        amount=Decimal(amount),
        date=date.fromisoformat(day),
        note=note,
        category=category,
        created_at=datetime(2024, 3, 1, 9, 30, 15, 123000, tzinfo=timezone.utc),
    )


@pytest.fixture
def records():
    return [
        _expense(3, "30.25", "2024-04-01"),
        _expense(2, "20", "2024-03-15", "Taxi", "travel"),
        _expense(1, "0.1", "2024-03-01"),
    ]


def test_round_trip_reproduces_records(repository, records):
    repository.save(records)

    assert repository.load() == records


def test_saved_blob_uses_expected_field_names(repository, blob_store, records):
    repository.save(records[:1])

    payload = json.loads(blob_store.get("expenses"))

    assert payload == [
        {
            "id": 3,
            "amount": "30.25",
            "date": "2024-04-01",
            "note": "Note",
            "category": "food",
            "createdAt": "2024-03-01T09:30:15.123Z",
        }
    ]


def test_missing_blob_is_absent(repository):
    assert repository.load() is None


def test_numeric_amounts_from_older_blobs_are_accepted():
    blob = json.dumps([
        {
            "id": 1709285415123,
            "amount": 12.5,
            "date": "2024-03-01",
            "note": "Coffee",
            "category": "food",
            "createdAt": "2024-03-01T09:30:15.123Z",
        }
    ])
    repository = ExpenseRepository(MemoryBlobStore({"expenses": blob}))

    (expense,) = repository.load()

    assert expense.amount == Decimal("12.5")
    assert expense.id == 1709285415123


@pytest.mark.parametrize(
    "blob",
    [
        "{broken",
        '{"id": 1}',
        '[{"id": 1}]',
        '[{"id": 1, "amount": "x", "date": "2024-03-01", "note": "n", "category": "food", "createdAt": "2024-03-01T00:00:00Z"}]',
        '[{"id": 1, "amount": "1", "date": "bad", "note": "n", "category": "food", "createdAt": "2024-03-01T00:00:00Z"}]',
    ],
)
def test_corrupted_blob_is_treated_as_absent(blob):
    repository = ExpenseRepository(MemoryBlobStore({"expenses": blob}))

    with pytest.warns(PersistenceWarning):
        assert repository.load() is None


def test_custom_key(blob_store, records):
    repository = ExpenseRepository(blob_store, key="archive")
    repository.save(records)

    assert blob_store.get("expenses") is None
    assert repository.load() == records


def test_json_file_blob_store(tmp_path):
    store = JSONFileBlobStore(tmp_path / "data")

    assert store.get("expenses") is None
    store.set("expenses", "[]")

    assert store.get("expenses") == "[]"
    assert (tmp_path / "data" / "expenses.json").read_text(encoding="utf-8") == "[]"
    assert not (tmp_path / "data" / "expenses.json.tmp").exists()


def test_json_file_repository_round_trip(tmp_path, records):
    repository = ExpenseRepository(JSONFileBlobStore(tmp_path))
    repository.save(records)

    assert ExpenseRepository(JSONFileBlobStore(tmp_path)).load() == records


def test_unreadable_file_is_treated_as_absent(tmp_path):
    (tmp_path / "expenses.json").mkdir()
    repository = ExpenseRepository(JSONFileBlobStore(tmp_path))

    with pytest.warns(PersistenceWarning):
        assert repository.load() is None


def _item(**overrides):
    item = {
        "id": 1,
        "amount": "10",
        "date": "2024-03-01",
        "note": "Lunch",
        "category": "food",
        "createdAt": "2024-03-01T00:00:00.000Z",
    }
    item.update(overrides)
    return item


@pytest.mark.parametrize(
    "items",
    [
        [_item(amount="-5")],
        [_item(amount="0")],
        [_item(amount="NaN")],
        [_item(amount="Infinity")],
        [_item(note="")],
        [_item(note="  padded  ")],
        [_item(category="pets")],
        [_item(category="FOOD")],
        [_item(id=1), _item(id=1, note="Dinner")],
    ],
)
def test_records_breaking_invariants_are_treated_as_absent(items):
    repository = ExpenseRepository(MemoryBlobStore({"expenses": json.dumps(items)}))

    with pytest.warns(PersistenceWarning):
        assert repository.load() is None


def test_non_utf8_file_is_treated_as_absent(tmp_path):
    (tmp_path / "expenses.json").write_bytes(b"\xff\xfe[garbage")
    repository = ExpenseRepository(JSONFileBlobStore(tmp_path))

    with pytest.warns(PersistenceWarning, match="UTF-8"):
        assert repository.load() is None
