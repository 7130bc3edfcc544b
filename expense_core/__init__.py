"""Core business logic package for the expense tracker."""

from .exceptions import PersistenceError, PersistenceWarning, RecordNotFoundError, ValidationError
from .models import ALL, CATEGORIES, Expense
from .queries import FilterCriteria, available_months, filter_expenses
from .services import ExpenseStore, IdGenerator
from .storage import ExpenseRepository, JSONFileBlobStore, MemoryBlobStore
from .summary import Summary, summarize
from .validators import ValidationResult, blank_draft, draft_from_expense, validate

__all__ = [
    "ALL",
    "CATEGORIES",
    "Expense",
    "ExpenseRepository",
    "ExpenseStore",
    "FilterCriteria",
    "IdGenerator",
    "JSONFileBlobStore",
    "MemoryBlobStore",
    "PersistenceError",
    "PersistenceWarning",
    "RecordNotFoundError",
    "Summary",
    "ValidationError",
    "ValidationResult",
    "available_months",
    "blank_draft",
    "draft_from_expense",
    "filter_expenses",
    "summarize",
    "validate",
]
