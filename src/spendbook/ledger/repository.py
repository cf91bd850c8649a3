from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from src.spendbook.ledger.config import LedgerConfig
from src.spendbook.ledger.errors import LedgerErrorCode, Outcome
from src.spendbook.ledger.inputs import parse_amount
from src.spendbook.ledger.models import Category, CategoryDraft, Expense, ExpenseDraft, generate_id
from src.spendbook.ledger.periods import is_valid_date
from src.spendbook.ledger.store import CATEGORIES, EXPENSES, Store
from src.utils.time import iso_timestamp

log = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _name_key(name: Any) -> str:
    return str(name or "").strip().casefold()


def _typed(records: list[Any], model: type[M], collection: str) -> list[M]:
    out: list[M] = []
    for r in records:
        try:
            out.append(model.model_validate(r))
        except ValidationError as e:
            rid = r.get("id") if isinstance(r, dict) else None
            log.warning("Skipping invalid %s record %r: %s", collection, rid, e.errors()[0].get("msg"))
    return out


class LedgerRepository:
    """
    Expense and category CRUD over a whole-collection store.

    Every mutation reads the full collection, edits it in memory and writes it back. Records that do not
    validate (e.g. from a hand-edited import) are kept in storage untouched but left out of typed reads.
    """

    def __init__(self, store: Store, config: Optional[LedgerConfig] = None):
        self.store = store
        self.config = config or LedgerConfig()

    # ---- raw collection access ----
    def _records(self, collection: str) -> list[Any]:
        value = self.store.read(collection)
        if not isinstance(value, list):
            log.warning("Stored %s is not a list (%s); treating as empty", collection, type(value).__name__)
            return []
        return value

    @staticmethod
    def _index_of(records: list[Any], record_id: str) -> int:
        for i, r in enumerate(records):
            if isinstance(r, dict) and r.get("id") == record_id:
                return i
        return -1

    # ---- expenses ----
    def get_expenses(self) -> list[Expense]:
        return _typed(self._records(EXPENSES), Expense, EXPENSES)

    def get_expense_by_id(self, expense_id: str) -> Optional[Expense]:
        for exp in self.get_expenses():
            if exp.id == expense_id:
                return exp
        return None

    def list_expenses(self) -> list[Expense]:
        """Newest first by date; expenses without a valid date go last in stored order."""
        expenses = self.get_expenses()
        dated = [e for e in expenses if is_valid_date(e.date)]
        undated = [e for e in expenses if not is_valid_date(e.date)]
        return sorted(dated, key=lambda e: e.date, reverse=True) + undated

    def recent_expenses(self, limit: Optional[int] = None) -> list[Expense]:
        n = self.config.recent_limit if limit is None else limit
        return self.list_expenses()[: max(0, int(n))]

    def add_expense(self, draft: ExpenseDraft) -> Outcome[Expense]:
        amount = parse_amount(draft.amount)
        if amount is None or amount <= 0:
            log.warning("Rejected expense with invalid amount %r", draft.amount)
            return Outcome.failure(LedgerErrorCode.INVALID_AMOUNT, f"Invalid amount: {draft.amount!r}")
        expense = Expense(
            id=generate_id(),
            amount=amount,
            date=(draft.date or "").strip(),
            category_id=draft.category_id,
            description=(draft.description or "").strip(),
            notes=(draft.notes or "").strip(),
            created_at=iso_timestamp(),
        )
        records = self._records(EXPENSES)
        records.append(expense.to_record())
        self.store.write(EXPENSES, records)
        log.info("Expense added: %s %.2f on %s", expense.id, expense.amount, expense.date)
        return Outcome.success(expense)

    def update_expense(self, expense_id: str, draft: ExpenseDraft) -> Outcome[Expense]:
        records = self._records(EXPENSES)
        idx = self._index_of(records, expense_id)
        if idx < 0:
            log.warning("Expense not found for update: %s", expense_id)
            return Outcome.failure(LedgerErrorCode.NOT_FOUND, f"Expense not found: {expense_id}")
        amount = parse_amount(draft.amount)
        if amount is None or amount <= 0:
            log.warning("Rejected update of %s with invalid amount %r", expense_id, draft.amount)
            return Outcome.failure(LedgerErrorCode.INVALID_AMOUNT, f"Invalid amount: {draft.amount!r}")
        current = records[idx]
        updated = Expense(
            id=expense_id,
            amount=amount,
            date=(draft.date or "").strip(),
            category_id=draft.category_id,
            description=(draft.description or "").strip(),
            notes=(draft.notes or "").strip(),
            created_at=str(current.get("createdAt") or ""),
        )
        records[idx] = {**current, **updated.to_record()}
        self.store.write(EXPENSES, records)
        log.info("Expense updated: %s", expense_id)
        return Outcome.success(updated)

    def delete_expense(self, expense_id: str) -> Outcome[None]:
        records = self._records(EXPENSES)
        kept = [r for r in records if not (isinstance(r, dict) and r.get("id") == expense_id)]
        if len(kept) == len(records):
            log.warning("Expense not found for deletion: %s", expense_id)
            return Outcome.failure(LedgerErrorCode.NOT_FOUND, f"Expense not found: {expense_id}")
        self.store.write(EXPENSES, kept)
        log.info("Expense deleted: %s", expense_id)
        return Outcome.success()

    def delete_expenses(self, expense_ids: Iterable[str]) -> int:
        """Bulk delete; returns how many of the ids existed. Unknown ids are ignored."""
        wanted = set(expense_ids)
        records = self._records(EXPENSES)
        kept = [r for r in records if not (isinstance(r, dict) and r.get("id") in wanted)]
        deleted = len(records) - len(kept)
        if deleted:
            self.store.write(EXPENSES, kept)
            log.info("Deleted %d expense(s)", deleted)
        return deleted

    def uses_category(self, category_id: str) -> bool:
        return any(isinstance(r, dict) and r.get("categoryId") == category_id for r in self._records(EXPENSES))

    # ---- categories ----
    def get_categories(self) -> list[Category]:
        return _typed(self._records(CATEGORIES), Category, CATEGORIES)

    def get_category_by_id(self, category_id: str) -> Optional[Category]:
        for cat in self.get_categories():
            if cat.id == category_id:
                return cat
        return None

    @staticmethod
    def _name_taken(records: list[Any], name: str, *, exclude_id: Optional[str] = None) -> bool:
        key = _name_key(name)
        for r in records:
            if not isinstance(r, dict):
                continue
            if exclude_id is not None and r.get("id") == exclude_id:
                continue
            if _name_key(r.get("name")) == key:
                return True
        return False

    def add_category(self, draft: CategoryDraft) -> Outcome[Category]:
        name = (draft.name or "").strip()
        if not name:
            return Outcome.failure(LedgerErrorCode.INVALID_INPUT, "Category name is required.")
        records = self._records(CATEGORIES)
        if self._name_taken(records, name):
            log.warning("Category %r already exists", name)
            return Outcome.failure(LedgerErrorCode.DUPLICATE_NAME, f'Category "{name}" already exists.')
        category = Category(
            id=generate_id(),
            name=name,
            color=(draft.color or "").strip() or self.config.default_category_color,
            icon=(draft.icon or "").strip() or self.config.default_category_icon,
            is_default=False,
        )
        records.append(category.to_record())
        self.store.write(CATEGORIES, records)
        log.info("Category added: %s (%s)", category.name, category.id)
        return Outcome.success(category)

    def update_category(self, category_id: str, draft: CategoryDraft) -> Outcome[Category]:
        name = (draft.name or "").strip()
        if not name:
            return Outcome.failure(LedgerErrorCode.INVALID_INPUT, "Category name is required.")
        records = self._records(CATEGORIES)
        if self._name_taken(records, name, exclude_id=category_id):
            log.warning("Another category named %r already exists", name)
            return Outcome.failure(
                LedgerErrorCode.DUPLICATE_NAME, f'Another category with the name "{name}" already exists.'
            )
        idx = self._index_of(records, category_id)
        if idx < 0:
            log.warning("Category not found for update: %s", category_id)
            return Outcome.failure(LedgerErrorCode.NOT_FOUND, f"Category not found: {category_id}")
        current = records[idx]
        # isDefault is never re-derived on edit.
        updated = Category(
            id=category_id,
            name=name,
            color=(draft.color or "").strip() or str(current.get("color") or self.config.default_category_color),
            icon=(draft.icon or "").strip() or str(current.get("icon") or self.config.default_category_icon),
            is_default=bool(current.get("isDefault", False)),
        )
        records[idx] = {**current, **updated.to_record()}
        self.store.write(CATEGORIES, records)
        log.info("Category updated: %s", category_id)
        return Outcome.success(updated)

    def delete_category(self, category_id: str) -> Outcome[None]:
        records = self._records(CATEGORIES)
        idx = self._index_of(records, category_id)
        if idx < 0:
            log.warning("Category not found for deletion: %s", category_id)
            return Outcome.failure(LedgerErrorCode.NOT_FOUND, f"Category not found: {category_id}")
        name = records[idx].get("name")
        if self.uses_category(category_id):
            log.warning("Cannot delete category %r: used by expenses", name)
            return Outcome.failure(
                LedgerErrorCode.IN_USE,
                f'Cannot delete category "{name}" because expenses use it. Reassign or delete them first.',
            )
        del records[idx]
        self.store.write(CATEGORIES, records)
        log.info("Category deleted: %s", category_id)
        return Outcome.success()

    def seed_default_categories(self) -> bool:
        """Writes the built-in categories on first run only; an explicitly emptied collection stays empty."""
        if self.store.has(CATEGORIES):
            return False
        defaults = [
            Category(id=generate_id(), name=d.name, color=d.color, icon=d.icon, is_default=True).to_record()
            for d in self.config.default_categories
        ]
        self.store.write(CATEGORIES, defaults)
        log.info("Seeded %d default categories", len(defaults))
        return True
