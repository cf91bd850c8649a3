from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

from src.spendbook.ledger.models import Category, CategoryTotal, DescriptionTotal, Expense

UNKNOWN_CATEGORY = Category(id="unknown", name="Unknown", color="#888", icon="❓")
NO_DESCRIPTION = "(No Description)"
OTHER_DESCRIPTIONS = "Other Descriptions"


def aggregate_by_category(expenses: Iterable[Expense], categories: Iterable[Category]) -> list[CategoryTotal]:
    """Spend per category, largest first. Expenses pointing at a missing category land in "Unknown"."""
    by_id = {c.id: c for c in categories}
    totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    meta: dict[str, Category] = {}
    for exp in expenses:
        cat = by_id.get(exp.category_id) or UNKNOWN_CATEGORY
        meta.setdefault(cat.id, cat)
        totals[cat.id] += Decimal(str(exp.amount))

    rows = [
        CategoryTotal(category_id=cid, name=meta[cid].name, color=meta[cid].color, icon=meta[cid].icon, total=float(t))
        for cid, t in totals.items()
    ]
    rows.sort(key=lambda r: -r.total)
    return rows


def top_category(totals: list[CategoryTotal]) -> Optional[CategoryTotal]:
    best: Optional[CategoryTotal] = None
    for row in totals:
        if row.total > (best.total if best else 0):
            best = row
    return best


def aggregate_by_description(expenses: Iterable[Expense], top_n: int = 10) -> list[DescriptionTotal]:
    """
    Spend per description (case-insensitive), largest first, truncated to `top_n`.

    Whatever falls below the cut is folded into one trailing "Other Descriptions" row, omitted when it sums
    to zero. Ties keep first-seen order.
    """
    labels: dict[str, str] = {}
    totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for exp in expenses:
        label = exp.description or NO_DESCRIPTION
        key = label.lower()
        labels.setdefault(key, label)
        totals[key] += Decimal(str(exp.amount))

    ranked = sorted(totals.items(), key=lambda kv: -kv[1])
    n = max(0, int(top_n))
    rows = [DescriptionTotal(description=labels[k], total=float(t)) for k, t in ranked[:n]]
    other = sum((t for _, t in ranked[n:]), Decimal("0"))
    if other > 0:
        rows.append(DescriptionTotal(description=OTHER_DESCRIPTIONS, total=float(other)))
    return rows
