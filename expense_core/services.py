"""Framework-agnostic business services for the expense tracker."""

from __future__ import annotations

import logging
import time
import warnings
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from .exceptions import PersistenceWarning, RecordNotFoundError, ValidationError
from .models import Expense, truncate_to_millis
from .storage import ExpenseRepository
from .validators import validate

__all__ = ["ExpenseStore", "IdGenerator"]

logger = logging.getLogger(__name__)


def _millis() -> int:
    return time.time_ns() // 1_000_000


class IdGenerator:
    """Issues integer ids from a millisecond clock, never repeating one.

    When the clock has not moved past the last issued id (two additions in
    the same millisecond, or a clock stepping backwards) the next id is the
    last one plus one.
    """

    def __init__(self, clock: Callable[[], int] = _millis, last: int = 0) -> None:
        self._clock = clock
        self._last = last

    def observe(self, ids: Iterable[int]) -> None:
        """Make sure future ids stay above every id in ``ids``."""
        for existing in ids:
            if existing > self._last:
                self._last = existing

    def __call__(self) -> int:
        candidate = self._clock()
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate


class ExpenseStore:
    """Owns the newest-first sequence of expenses and mediates persistence."""

    def __init__(
        self,
        repository: Optional[ExpenseRepository] = None,
        *,
        id_generator: Optional[IdGenerator] = None,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._repository = repository
        self._next_id = id_generator or IdGenerator()
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._expenses: List[Expense] = []
        self.load()  # Hydrate in-memory state from persistence on construction.

    # Public API -----------------------------------------------------------
    def add(self, draft: Mapping[str, Any]) -> Expense:
        cleaned = self._clean_or_raise(draft)
        expense = Expense(
            id=self._next_id(),
            created_at=truncate_to_millis(self._now()),
            **cleaned,
        )
        self._expenses.insert(0, expense)
        logger.debug("Added expense %s", expense.id)
        self._persist()
        return expense

    def update(self, expense_id: int, draft: Mapping[str, Any]) -> Expense:
        index = self._index_or_raise(expense_id)
        cleaned = self._clean_or_raise(draft)
        existing = self._expenses[index]
        updated = Expense(id=existing.id, created_at=existing.created_at, **cleaned)
        self._expenses[index] = updated
        logger.debug("Updated expense %s", expense_id)
        self._persist()
        return updated

    def remove(self, expense_id: int) -> None:
        """Remove the expense if present; a missing id is silently ignored."""
        index = self._find(expense_id)
        if index is None:
            return
        del self._expenses[index]
        logger.debug("Removed expense %s", expense_id)
        self._persist()

    def get(self, expense_id: int) -> Expense:
        """Return an expense or raise if it does not exist."""
        return self._expenses[self._index_or_raise(expense_id)]

    def list(self) -> Tuple[Expense, ...]:
        return tuple(self._expenses)

    def load(self) -> None:
        """Replace in-memory state with the persisted records, if any."""
        if self._repository is None:
            return
        records = self._repository.load()
        self._expenses = list(records or [])
        self._next_id.observe(expense.id for expense in self._expenses)

    def __len__(self) -> int:
        return len(self._expenses)

    def __contains__(self, expense_id: object) -> bool:
        return any(expense.id == expense_id for expense in self._expenses)

    # Internal helpers -----------------------------------------------------
    def _persist(self) -> None:
        if self._repository is None:
            return
        try:
            self._repository.save(self._expenses)
        except OSError as exc:
            # PersistenceError included; the in-memory state stays authoritative.
            logger.error("Failed to save expenses: %s", exc)
            warnings.warn(f"Expenses were not saved: {exc}", PersistenceWarning, stacklevel=3)

    def _find(self, expense_id: int) -> Optional[int]:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return index
        return None

    def _index_or_raise(self, expense_id: int) -> int:
        index = self._find(expense_id)
        if index is None:
            raise RecordNotFoundError(f"Expense {expense_id} not found")
        return index

    @staticmethod
    def _clean_or_raise(draft: Mapping[str, Any]) -> dict:
        result = validate(draft)
        if not result.valid:
            raise ValidationError(
                "; ".join(result.errors.values()), result.errors
            )
        return dict(result.cleaned or {})
