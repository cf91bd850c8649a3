from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from src.spendbook.ledger.errors import LedgerErrorCode, Outcome
from src.spendbook.ledger.inputs import parse_amount
from src.spendbook.ledger.models import Category
from src.spendbook.ledger.store import BUDGETS, Store

log = logging.getLogger(__name__)


class BudgetRepository:
    """Per-category budget amounts stored as one {categoryId: amount} mapping."""

    def __init__(self, store: Store):
        self.store = store

    def get_budgets(self) -> dict[str, Any]:
        value = self.store.read(BUDGETS)
        if not isinstance(value, dict):
            log.warning("Stored budgets are not a mapping (%s); treating as empty", type(value).__name__)
            return {}
        return value

    def get_budget_for_category(self, category_id: str) -> Optional[float]:
        value = self.get_budgets().get(category_id)
        if value is None:
            return None
        return parse_amount(value)

    def set_budget_for_category(self, category_id: str, amount: Any) -> Outcome[float]:
        parsed = parse_amount(amount)
        if parsed is None or parsed < 0:
            log.warning("Invalid budget amount for category %s: %r", category_id, amount)
            return Outcome.failure(
                LedgerErrorCode.INVALID_AMOUNT,
                f"Invalid budget amount for category {category_id}: {amount!r}. Enter a number of 0 or more.",
            )
        budgets = self.get_budgets()
        budgets[category_id] = parsed
        self.store.write(BUDGETS, budgets)
        log.info("Budget set for category %s: %.2f", category_id, parsed)
        return Outcome.success(parsed)

    def delete_budget_for_category(self, category_id: str) -> bool:
        budgets = self.get_budgets()
        if category_id not in budgets:
            return False
        del budgets[category_id]
        self.store.write(BUDGETS, budgets)
        log.info("Budget deleted for category %s", category_id)
        return True

    def save_all_budgets(self, budgets: Mapping[str, Any]) -> None:
        # Unchecked bulk replace; callers validate every entry first.
        self.store.write(BUDGETS, dict(budgets))
        log.info("All budgets saved (%d entries)", len(budgets))

    def reconcile_budgets(self, categories: Iterable[Category], inputs: Mapping[str, float]) -> bool:
        """
        Apply edited budget inputs for every category.

        A supplied amount is upserted unless it equals the stored one, so re-saving an untouched form
        writes nothing. A category with no supplied amount loses any budget it had.
        Returns True when anything changed.
        """
        existing = self.get_budgets()
        changed = False
        for cat in categories:
            if cat.id in inputs:
                if existing.get(cat.id) == inputs[cat.id]:
                    continue
                if self.set_budget_for_category(cat.id, inputs[cat.id]):
                    changed = True
            elif cat.id in existing:
                if self.delete_budget_for_category(cat.id):
                    changed = True
        return changed
