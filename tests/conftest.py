from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from expense_core.services import ExpenseStore, IdGenerator
from expense_core.storage import ExpenseRepository, MemoryBlobStore


class FixedClock:
    """Advances one second per call, starting from a fixed instant."""

    def __init__(self, start=datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)):
        self._ticks = count()
        self._start = start

    def __call__(self):
        return self._start + timedelta(seconds=next(self._ticks))


@pytest.fixture
def blob_store():
    return MemoryBlobStore()


@pytest.fixture
def repository(blob_store):
    return ExpenseRepository(blob_store)


@pytest.fixture
def store(repository):
    # Frozen millisecond clock: every id after the first comes from the counter fallback.
    return ExpenseStore(
        repository,
        id_generator=IdGenerator(clock=lambda: 1_700_000_000_000),
        now=FixedClock(),
    )


@pytest.fixture
def sample_drafts():
    return [
        {"amount": "50", "date": "2024-03-01", "note": "Groceries", "category": "food"},
        {"amount": "20", "date": "2024-03-15", "note": "Bus pass", "category": "travel"},
        {"amount": "30", "date": "2024-04-01", "note": "Dinner", "category": "food"},
    ]
