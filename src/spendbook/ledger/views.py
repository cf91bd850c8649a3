from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable, Optional

from src.spendbook.ledger.aggregate import UNKNOWN_CATEGORY, aggregate_by_category, aggregate_by_description, top_category
from src.spendbook.ledger.budget_status import budget_status
from src.spendbook.ledger.budgets import BudgetRepository
from src.spendbook.ledger.errors import Outcome
from src.spendbook.ledger.models import (
    AnalyticsReport,
    BudgetPage,
    Category,
    DashboardSummary,
    Expense,
    ExpenseListRow,
)
from src.spendbook.ledger.periods import filter_window, resolve_window, validate_range
from src.spendbook.ledger.repository import LedgerRepository
from src.utils.money import sum_amounts

log = logging.getLogger(__name__)


def _rows(expenses: Iterable[Expense], categories: Iterable[Category]) -> list[ExpenseListRow]:
    by_id = {c.id: c for c in categories}
    out: list[ExpenseListRow] = []
    for exp in expenses:
        cat = by_id.get(exp.category_id) or UNKNOWN_CATEGORY
        out.append(ExpenseListRow(expense=exp, category_name=cat.name, category_icon=cat.icon))
    return out


def expense_list(ledger: LedgerRepository) -> list[ExpenseListRow]:
    return _rows(ledger.list_expenses(), ledger.get_categories())


def dashboard(ledger: LedgerRepository, *, today: Optional[dt.date] = None) -> DashboardSummary:
    expenses = ledger.get_expenses()
    categories = ledger.get_categories()
    window = resolve_window(expenses, today=today)
    in_window = filter_window(expenses, window)
    top = top_category(aggregate_by_category(in_window, categories))
    return DashboardSummary(
        period_label=window.label,
        total_spent=sum_amounts(e.amount for e in in_window),
        expense_count=len(in_window),
        top_category_name=top.name if top else "N/A",
        top_category_amount=top.total if top else 0.0,
        recent=_rows(ledger.recent_expenses(), categories),
    )


def analytics(
    ledger: LedgerRepository,
    *,
    start: Optional[str] = None,
    end: Optional[str] = None,
    top_n: Optional[int] = None,
    today: Optional[dt.date] = None,
) -> Outcome[AnalyticsReport]:
    checked = validate_range(start, end)
    if not checked:
        return checked
    expenses = ledger.get_expenses()
    window = resolve_window(expenses, start, end, today=today)
    in_window = filter_window(expenses, window)
    log.debug("Found %d expenses for %s", len(in_window), window.label)
    n = ledger.config.top_descriptions if top_n is None else top_n
    return Outcome.success(
        AnalyticsReport(
            period_label=window.label,
            start_date=window.start_date,
            end_date=window.end_date,
            by_category=aggregate_by_category(in_window, ledger.get_categories()),
            by_description=aggregate_by_description(in_window, top_n=n),
        )
    )


def budget_page(ledger: LedgerRepository, budgets: BudgetRepository, *, today: Optional[dt.date] = None) -> BudgetPage:
    expenses = ledger.get_expenses()
    window = resolve_window(expenses, today=today)
    current = budgets.get_budgets()
    return BudgetPage(
        period_label=window.label,
        budgets={k: float(v) for k, v in current.items() if isinstance(v, (int, float)) and not isinstance(v, bool)},
        status=budget_status(ledger.get_categories(), current, filter_window(expenses, window)),
    )
