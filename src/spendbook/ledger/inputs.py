from __future__ import annotations

import datetime as dt
import math
from typing import Any, Mapping, Optional

from src.spendbook.ledger.errors import LedgerErrorCode, Outcome
from src.spendbook.ledger.models import ExpenseDraft
from src.utils.money import to_decimal


def parse_amount(value: Any) -> Optional[float]:
    """Float for numeric input ("12.50", 12.5, "1,200"), None for blank, non-numeric or non-finite input."""
    d = to_decimal(value)
    if d is None:
        return None
    # Finite decimals such as 1e400 still overflow to inf.
    amount = float(d)
    if not math.isfinite(amount):
        return None
    return amount


def parse_expense_input(
    *,
    amount: Any,
    date: Optional[str],
    category_id: Optional[str],
    description: Optional[str] = "",
    notes: Optional[str] = "",
) -> Outcome[ExpenseDraft]:
    amt = parse_amount(amount)
    if amt is None or amt <= 0:
        return Outcome.failure(LedgerErrorCode.INVALID_AMOUNT, "Amount must be a positive number.")
    d = (date or "").strip()
    if not d:
        return Outcome.failure(LedgerErrorCode.INVALID_INPUT, "Please select a date.")
    cid = (category_id or "").strip()
    if not cid:
        return Outcome.failure(LedgerErrorCode.INVALID_INPUT, "Please select a category.")
    return Outcome.success(
        ExpenseDraft(
            amount=amt,
            date=d,
            category_id=cid,
            description=(description or "").strip(),
            notes=(notes or "").strip(),
        )
    )


def parse_quick_add(
    *,
    description: Optional[str],
    amount: Any,
    category_id: Optional[str],
    today: dt.date,
) -> Outcome[ExpenseDraft]:
    # Quick add requires a description and is always dated today, without notes.
    if not (description or "").strip():
        return Outcome.failure(LedgerErrorCode.INVALID_INPUT, "Please enter a description for the quick add expense.")
    return parse_expense_input(
        amount=amount,
        date=today.isoformat(),
        category_id=category_id,
        description=description,
        notes="",
    )


def parse_budget_inputs(raw: Mapping[str, Any]) -> Outcome[dict[str, float]]:
    """
    Parse per-category budget form values.

    Blank values are left out of the result, which reconciliation treats as "remove this budget".
    Any invalid entry rejects the whole form.
    """
    parsed: dict[str, float] = {}
    for category_id, value in raw.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        amt = parse_amount(value)
        if amt is None or amt < 0:
            return Outcome.failure(
                LedgerErrorCode.INVALID_AMOUNT,
                f"Invalid budget amount for category {category_id}: {value!r}. "
                "Enter a positive number or leave it blank.",
            )
        parsed[category_id] = amt
    return Outcome.success(parsed)
