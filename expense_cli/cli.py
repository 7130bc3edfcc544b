"""Console interface for the expense tracker."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Callable, Dict, List, Optional

from expense_core.config import Settings
from expense_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from expense_core.formatting import category_label, format_money, month_label
from expense_core.models import ALL, CATEGORIES, DEFAULT_CATEGORY, Expense
from expense_core.queries import FilterCriteria, available_months, filter_expenses
from expense_core.services import ExpenseStore
from expense_core.storage import ExpenseRepository, JSONFileBlobStore
from expense_core.summary import summarize
from expense_core.validators import draft_from_expense, validate

DELETE_PROMPT = "Are you sure you want to delete this expense?"


def _load_store(data_dir: Path) -> ExpenseStore:
    return ExpenseStore(ExpenseRepository(JSONFileBlobStore(data_dir)))


def _format_expense(expense: Expense) -> str:
    return (
        f"[{expense.id}] {expense.date.isoformat()} {format_money(expense.amount)}\n"
        f"  Category: {category_label(expense.category)}\n"
        f"  Note: {expense.note}\n"
    )


def _print_errors(errors: Dict[str, str]) -> None:
    for field, message in errors.items():
        print(f"{field}: {message}", file=sys.stderr)


def _criteria(args: argparse.Namespace) -> FilterCriteria:
    return FilterCriteria(category=args.category, month=args.month)


def handle_add(args: argparse.Namespace, store: ExpenseStore) -> int:
    draft = {
        "amount": args.amount,
        "date": args.date,
        "note": args.note,
        "category": args.category,
    }
    result = validate(draft)
    if not result.valid:
        _print_errors(result.errors)
        return 1
    expense = store.add(draft)
    print("Expense added:\n" + _format_expense(expense))
    return 0


def handle_edit(args: argparse.Namespace, store: ExpenseStore) -> int:
    # Unspecified options keep the stored values; update always replaces all four fields.
    draft = draft_from_expense(store.get(args.id))
    changes = {
        "amount": args.amount,
        "date": args.date,
        "note": args.note,
        "category": args.category,
    }
    draft.update({k: v for k, v in changes.items() if v is not None})
    result = validate(draft)
    if not result.valid:
        _print_errors(result.errors)
        return 1
    expense = store.update(args.id, draft)
    print("Expense updated:\n" + _format_expense(expense))
    return 0


def handle_delete(
    args: argparse.Namespace, store: ExpenseStore, confirm: Optional[Callable[[str], str]] = None
) -> int:
    if not args.yes:
        answer = (confirm or input)(f"{DELETE_PROMPT} [y/N] ")
        if answer.strip().lower() not in {"y", "yes"}:
            print("Delete cancelled.")
            return 0
    store.remove(args.id)
    print(f"Expense {args.id} deleted.")
    return 0


def handle_list(args: argparse.Namespace, store: ExpenseStore) -> int:
    expenses = filter_expenses(store.list(), _criteria(args))
    if not expenses:
        print("No expenses found.")
        return 0
    summary = summarize(expenses)
    print(f"Found {summary.count} expenses (total {format_money(summary.total)}):")
    for expense in expenses:
        print(_format_expense(expense))
    return 0


def handle_summary(args: argparse.Namespace, store: ExpenseStore) -> int:
    summary = summarize(filter_expenses(store.list(), _criteria(args)))
    print(f"Total Expenses: {format_money(summary.total)}")
    print(f"Total Transactions: {summary.count}")
    print(f"Categories: {len(summary.by_category)}")
    if not summary.by_category:
        return 0
    print("By Category:")
    for category, amount in summary.by_category.items():
        print(f"  {category_label(category)}: {format_money(amount)}")
    print("By Month:")
    for month in sorted(summary.by_month, reverse=True):
        print(f"  {month_label(month)}: {format_money(summary.by_month[month])}")
    return 0


def handle_months(args: argparse.Namespace, store: ExpenseStore) -> int:
    months = available_months(store.list())
    if not months:
        print("No expenses recorded yet.")
    for month in months:
        print(f"{month}  {month_label(month)}")
    return 0


def _add_filter_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--category", default=ALL, choices=(ALL,) + CATEGORIES)
    parser.add_argument("--month", default=ALL, help="YYYY-MM or 'all' (default: all)")


def build_parser(settings: Optional[Settings] = None) -> argparse.ArgumentParser:
    settings = settings or Settings.from_env()
    parser = argparse.ArgumentParser(description="Personal Expense Tracker CLI")
    parser.add_argument(
        "--data-dir",
        default=settings.data_dir,
        type=Path,
        help=f"Directory to store JSON data (default: {settings.data_dir})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Add a new expense")
    add.add_argument("amount")
    add.add_argument("note")
    add.add_argument("--date", default=None, help="YYYY-MM-DD (default: today)")
    add.add_argument("--category", default=DEFAULT_CATEGORY, choices=CATEGORIES)
    add.set_defaults(handler=handle_add)

    edit = subparsers.add_parser("edit", help="Edit an existing expense")
    edit.add_argument("id", type=int)
    edit.add_argument("--amount")
    edit.add_argument("--date")
    edit.add_argument("--note")
    edit.add_argument("--category", choices=CATEGORIES)
    edit.set_defaults(handler=handle_edit)

    delete = subparsers.add_parser("delete", help="Delete an expense")
    delete.add_argument("id", type=int)
    delete.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    delete.set_defaults(handler=handle_delete)

    list_parser = subparsers.add_parser("list", help="List expenses, newest first")
    _add_filter_options(list_parser)
    list_parser.set_defaults(handler=handle_list)

    summary = subparsers.add_parser("summary", help="Show totals by category and month")
    _add_filter_options(summary)
    summary.set_defaults(handler=handle_summary)

    months = subparsers.add_parser("months", help="List months that have expenses")
    months.set_defaults(handler=handle_months)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    parser = build_parser(settings)
    args = parser.parse_args(argv)
    if args.command == "add" and args.date is None:
        args.date = date.today().isoformat()

    try:
        store = _load_store(args.data_dir)
        return args.handler(args, store)
    except ValidationError as exc:
        if exc.errors:
            _print_errors(exc.errors)
        else:
            print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
