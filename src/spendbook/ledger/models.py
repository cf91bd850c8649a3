from __future__ import annotations

import datetime as dt
import random
import string
import time
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_BASE36 = string.digits + string.ascii_lowercase


def _base36(n: int) -> str:
    if n <= 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_BASE36[r])
    return "".join(reversed(out))


def generate_id() -> str:
    """Short unique id: "_" + 9 random base36 chars + base36 epoch milliseconds."""
    rand = "".join(random.choice(_BASE36) for _ in range(9))
    return "_" + rand + _base36(int(time.time() * 1000))


class _Record(BaseModel):
    # Attribute names are snake_case; the stored/exported JSON uses the camelCase aliases.
    model_config = ConfigDict(populate_by_name=True)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class Expense(_Record):
    id: str
    amount: float = Field(gt=0, allow_inf_nan=False)
    date: str
    category_id: str = Field(alias="categoryId")
    description: str = ""
    notes: str = ""
    created_at: str = Field(alias="createdAt")

    @field_validator("description", "notes", mode="before")
    @classmethod
    def _none_to_blank(cls, v: Any) -> Any:
        return "" if v is None else v


class Category(_Record):
    id: str
    name: str
    color: str
    icon: str
    is_default: bool = Field(default=False, alias="isDefault")

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        n = (v or "").strip()
        if not n:
            raise ValueError("Category name is required")
        return n


@dataclass(frozen=True)
class ExpenseDraft:
    """Caller-supplied expense fields; amount may still be raw form text."""

    amount: Any
    date: str
    category_id: str
    description: str = ""
    notes: Optional[str] = ""


@dataclass(frozen=True)
class CategoryDraft:
    name: str
    color: Optional[str] = None
    icon: Optional[str] = None


@dataclass(frozen=True)
class Window:
    start: dt.datetime
    end: dt.datetime
    label: str

    @property
    def start_date(self) -> dt.date:
        return self.start.date()

    @property
    def end_date(self) -> dt.date:
        return self.end.date()

    def contains(self, day: dt.date) -> bool:
        return self.start <= dt.datetime.combine(day, dt.time.min) <= self.end


class CategoryTotal(BaseModel):
    category_id: str
    name: str
    color: str
    icon: str
    total: float


class DescriptionTotal(BaseModel):
    description: str
    total: float


class BudgetStatusRow(BaseModel):
    category_id: str
    name: str
    icon: str
    spent: float
    budget: float
    percentage: float
    is_over_budget: bool


class ExpenseListRow(BaseModel):
    expense: Expense
    category_name: str
    category_icon: str


class DashboardSummary(BaseModel):
    period_label: str
    total_spent: float
    expense_count: int
    top_category_name: str = "N/A"
    top_category_amount: float = 0.0
    recent: list[ExpenseListRow] = Field(default_factory=list)


class AnalyticsReport(BaseModel):
    period_label: str
    start_date: dt.date
    end_date: dt.date
    by_category: list[CategoryTotal]
    by_description: list[DescriptionTotal]


class BudgetPage(BaseModel):
    period_label: str
    budgets: dict[str, float]
    status: list[BudgetStatusRow]


class ImportResult(BaseModel):
    applied: list[str]
    skipped: list[str]
