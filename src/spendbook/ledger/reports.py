from __future__ import annotations

from typing import Sequence

from src.spendbook.ledger.models import (
    AnalyticsReport,
    BudgetPage,
    BudgetStatusRow,
    Category,
    DashboardSummary,
    ExpenseListRow,
)
from src.utils.money import format_money


def format_table(rows: Sequence[Sequence[str]], *, headers: Sequence[str], align: str = "") -> str:
    """
    Plain-text table. `align` holds one char per column: "<" left (default) or ">" right.
    """
    if not rows:
        return "(no rows)"
    widths = [max(len(h), *(len(str(r[i])) for r in rows)) for i, h in enumerate(headers)]
    aligns = [(align[i] if i < len(align) else "<") for i in range(len(headers))]

    def line(cells: Sequence[str]) -> str:
        return "  ".join(f"{str(c):{a}{w}}" for c, a, w in zip(cells, aligns, widths)).rstrip()

    out = [line(headers), line(["-" * w for w in widths])]
    for r in rows:
        out.append(line(r))
    return "\n".join(out)


def render_expenses(rows: list[ExpenseListRow], *, currency: str = "USD") -> str:
    table = [
        (
            r.expense.id,
            r.expense.date,
            f"{r.category_icon} {r.category_name}",
            r.expense.description or "(No Description)",
            format_money(r.expense.amount, currency),
        )
        for r in rows
    ]
    return format_table(table, headers=("Id", "Date", "Category", "Description", "Amount"), align="<<<<>")


def render_categories(categories: list[Category]) -> str:
    table = [(c.id, f"{c.icon} {c.name}", c.color, "yes" if c.is_default else "") for c in categories]
    return format_table(table, headers=("Id", "Name", "Color", "Default"))


def render_dashboard(summary: DashboardSummary, *, currency: str = "USD") -> str:
    lines = [
        f"Period: {summary.period_label}",
        f"Total Spent: {format_money(summary.total_spent, currency)}",
        f"Expenses: {summary.expense_count}",
        f"Top Category (by amount): {summary.top_category_name} ({format_money(summary.top_category_amount, currency)})",
        "",
        "Recent expenses",
        render_expenses(summary.recent, currency=currency),
    ]
    return "\n".join(lines)


def render_analytics(report: AnalyticsReport, *, currency: str = "USD") -> str:
    cats = [(f"{r.icon} {r.name}", format_money(r.total, currency)) for r in report.by_category]
    descs = [(r.description, format_money(r.total, currency)) for r in report.by_description]
    return "\n".join(
        [
            f"Period: {report.period_label} ({report.start_date} .. {report.end_date})",
            "",
            "Spending by category",
            format_table(cats, headers=("Category", "Total"), align="<>"),
            "",
            "Spending by description",
            format_table(descs, headers=("Description", "Total"), align="<>"),
        ]
    )


def _status_row(r: BudgetStatusRow, currency: str) -> tuple[str, ...]:
    return (
        f"{r.icon} {r.name}",
        format_money(r.spent, currency),
        format_money(r.budget, currency),
        f"{r.percentage:.1f}%",
        "OVER" if r.is_over_budget else "",
    )


def render_budget_page(page: BudgetPage, *, currency: str = "USD") -> str:
    rows = [_status_row(r, currency) for r in page.status]
    return f"Budget status for {page.period_label}\n" + format_table(
        rows, headers=("Category", "Spent", "Budget", "Used", ""), align="<>>><"
    )
