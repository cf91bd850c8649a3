from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Any, Iterable, Mapping

from src.spendbook.ledger.inputs import parse_amount
from src.spendbook.ledger.models import BudgetStatusRow, Category, Expense


def budget_status(
    categories: Iterable[Category],
    budgets: Mapping[str, Any],
    expenses_in_window: Iterable[Expense],
) -> list[BudgetStatusRow]:
    """
    Utilization per budgeted category, highest spent/budget ratio first.

    Only categories with a strictly positive budget appear; budgets keyed by deleted categories are ignored
    because the rows come from the live category list.
    """
    spent_by_cat: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for exp in expenses_in_window:
        spent_by_cat[exp.category_id] += Decimal(str(exp.amount))

    rows: list[BudgetStatusRow] = []
    for cat in categories:
        budget = parse_amount(budgets.get(cat.id)) if cat.id in budgets else None
        if budget is None or budget <= 0:
            continue
        spent = float(spent_by_cat.get(cat.id, Decimal("0")))
        rows.append(
            BudgetStatusRow(
                category_id=cat.id,
                name=cat.name,
                icon=cat.icon,
                spent=spent,
                budget=budget,
                percentage=(spent / budget) * 100 if budget > 0 else 0.0,
                is_over_budget=spent > budget,
            )
        )
    rows.sort(key=lambda r: -(r.spent / r.budget))
    return rows
