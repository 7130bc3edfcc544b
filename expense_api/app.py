"""Flask JSON API exposing the expense tracker core to a local front end."""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from flask import Flask, jsonify, request
from flask_cors import CORS

from expense_core.config import Settings
from expense_core.exceptions import (
    PersistenceError,
    PersistenceWarning,
    RecordNotFoundError,
    ValidationError,
)
from expense_core.models import CATEGORIES
from expense_core.queries import FilterCriteria, available_months, filter_expenses
from expense_core.services import ExpenseStore
from expense_core.storage import ExpenseRepository, JSONFileBlobStore
from expense_core.summary import summarize
from expense_core.validators import blank_draft, validate

WARNING_HEADER = "X-Expense-Warning"


def create_app(
    data_dir: Optional[Path] = None,
    *,
    settings: Optional[Settings] = None,
    store: Optional[ExpenseStore] = None,
) -> Flask:
    settings = settings or Settings.from_env()
    app = Flask(__name__)

    if settings.is_dev:
        CORS(app, resources={r"/*": {"origins": "*"}})
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": settings.allowed_origins}})
    else:
        CORS(app)

    if store is None:
        blob_store = JSONFileBlobStore(Path(data_dir or settings.data_dir))
        store = ExpenseStore(ExpenseRepository(blob_store))
    app.extensions["expense_store"] = store

    def _success(payload: Any, status: int = 200, notices: Optional[List[str]] = None):
        headers = {WARNING_HEADER: " | ".join(notices)} if notices else {}
        if status == 204:
            return ("", status, headers)
        if notices:
            payload = {**payload, "warnings": notices}
        return jsonify(payload), status, headers

    def _mutate(operation: Callable[[], Any]) -> Tuple[Any, List[str]]:
        # Save failures do not abort the mutation; hand them to the caller instead.
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", PersistenceWarning)
            result = operation()
        notices: List[str] = []
        for item in caught:
            if issubclass(item.category, PersistenceWarning):
                notices.append(str(item.message))
                app.logger.warning("%s", item.message)
            else:
                warnings.warn(item.message, item.category)
        return result, notices

    def _handle_error(exc: Exception, status: int, message: str, **extra: Any):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc), **extra}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error", fields=exc.errors)

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _validated_draft() -> Dict[str, Any]:
        draft = _json_body()
        result = validate(draft)
        if not result.valid:
            raise ValidationError("Expense draft is invalid", result.errors)
        return draft

    def _criteria() -> FilterCriteria:
        return FilterCriteria.from_mapping(
            {"category": request.args.get("category"), "month": request.args.get("month")}
        )

    @app.get("/categories")
    def list_categories():
        return _success({"items": list(CATEGORIES)})

    @app.get("/drafts/blank")
    def new_draft():
        return _success(blank_draft())

    @app.get("/expenses")
    def list_expenses():
        expenses = filter_expenses(store.list(), _criteria())
        return _success({
            "items": [expense.to_dict() for expense in expenses],
            "summary": summarize(expenses).to_dict(),
        })

    @app.post("/expenses")
    def create_expense():
        draft = _validated_draft()
        expense, notices = _mutate(lambda: store.add(draft))
        return _success(expense.to_dict(), 201, notices)

    @app.get("/expenses/<int:expense_id>")
    def get_expense(expense_id: int):
        return _success(store.get(expense_id).to_dict())

    @app.put("/expenses/<int:expense_id>")
    def update_expense(expense_id: int):
        # Stale references are reported before the draft is looked at.
        store.get(expense_id)
        draft = _validated_draft()
        expense, notices = _mutate(lambda: store.update(expense_id, draft))
        return _success(expense.to_dict(), notices=notices)

    @app.delete("/expenses/<int:expense_id>")
    def delete_expense(expense_id: int):
        _, notices = _mutate(lambda: store.remove(expense_id))
        return _success({}, 204, notices)

    @app.get("/summary")
    def summary():
        expenses = filter_expenses(store.list(), _criteria())
        return _success(summarize(expenses).to_dict())

    @app.get("/months")
    def months():
        return _success({"items": available_months(store.list())})

    return app
