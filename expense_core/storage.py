"""Persistence utilities for the expense tracker core."""

from __future__ import annotations

import json
import logging
import warnings
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

from .exceptions import PersistenceError, PersistenceWarning
from .models import Expense
from .validators import draft_from_expense, validate

__all__ = ["BlobStore", "ExpenseRepository", "JSONFileBlobStore", "MemoryBlobStore"]

logger = logging.getLogger(__name__)

EXPENSES_KEY = "expenses"


class BlobStore(Protocol):
    """Key-value store of text blobs."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryBlobStore:
    """Dictionary-backed blob store, mostly useful in tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._blobs: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def set(self, key: str, value: str) -> None:
        self._blobs[key] = value


class JSONFileBlobStore:
    """Simple file-based blob storage with crash-safe writes."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Unable to create {self._base_path}") from exc

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise PersistenceError(f"{path} is not valid UTF-8 text") from exc
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
            # Use replace for atomic move on POSIX.
            temp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write to {path}") from exc

    def _path_for(self, key: str) -> Path:
        return self._base_path / f"{key}.json"

    @property
    def base_path(self) -> Path:
        return self._base_path


class ExpenseRepository:
    """Loads and saves the full expense sequence under a single blob key."""

    def __init__(self, blob_store: BlobStore, key: str = EXPENSES_KEY) -> None:
        self._blob_store = blob_store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> Optional[List[Expense]]:
        """Return the persisted records, or None when absent or unreadable.

        A corrupted blob is degraded to "absent" with a PersistenceWarning.
        """
        try:
            raw = self._blob_store.get(self._key)
        except OSError as exc:
            # PersistenceError included.
            _warn(f"Could not read saved expenses: {exc}")
            return None
        if raw is None:
            return None

        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise ValueError(f"expected a list, got {type(payload).__name__}")
            return _checked([Expense.from_dict(item) for item in payload])
        except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
            _warn(f"Ignoring corrupted expense data under '{self._key}': {exc}")
            return None

    def save(self, records: Iterable[Expense]) -> None:
        """Serialise every record and write the blob; raises PersistenceError."""
        text = json.dumps([record.to_dict() for record in records], indent=2)
        self._blob_store.set(self._key, text)
        logger.debug("Saved expenses under '%s'", self._key)


def _warn(message: str) -> None:
    logger.warning(message)
    warnings.warn(message, PersistenceWarning, stacklevel=3)


def _checked(records: List[Expense]) -> List[Expense]:
    """Reject records that break the model invariants; raises ValueError."""
    seen = set()
    for record in records:
        if record.id in seen:
            raise ValueError(f"duplicate id {record.id}")
        seen.add(record.id)
        result = validate(draft_from_expense(record))
        if not result.valid:
            raise ValueError(f"expense {record.id}: {'; '.join(result.errors.values())}")
        cleaned = result.cleaned or {}
        if cleaned["note"] != record.note or cleaned["category"] != record.category:
            raise ValueError(f"expense {record.id}: note or category is not normalised")
    return records
