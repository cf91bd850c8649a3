from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from src.db.session import DEFAULT_DATABASE_URL


class DefaultCategory(BaseModel):
    name: str
    color: str
    icon: str


class LedgerConfig(BaseModel):
    database_url: Optional[str] = None  # defaults to SPENDBOOK_DATABASE_URL / ./data/spendbook.db
    currency: str = "USD"
    default_category_color: str = "#cccccc"
    default_category_icon: str = "🏷️"
    default_categories: list[DefaultCategory] = Field(
        default_factory=lambda: [
            DefaultCategory(name="Food", color="#FF6384", icon="🍔"),
            DefaultCategory(name="Transport", color="#36A2EB", icon="🚗"),
            DefaultCategory(name="Utilities", color="#FFCE56", icon="💡"),
            DefaultCategory(name="Entertainment", color="#4BC0C0", icon="🎬"),
            DefaultCategory(name="Other", color="#9966FF", icon="❓"),
        ]
    )
    top_descriptions: int = 10
    recent_limit: int = 5
    log_level: str = "WARNING"

    def resolved_database_url(self) -> str:
        return self.database_url or os.environ.get("SPENDBOOK_DATABASE_URL", DEFAULT_DATABASE_URL)


def _candidate_paths() -> list[Path]:
    paths = [Path("spendbook.yaml")]
    home = Path(os.path.expanduser("~"))
    paths.append(home / ".spendbook" / "spendbook.yaml")
    return paths


def load_ledger_config(path: Optional[Path] = None) -> tuple[LedgerConfig, Optional[str]]:
    candidates = [path] if path is not None else _candidate_paths()
    for p in candidates:
        if p.exists():
            data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
            return LedgerConfig.model_validate(data.get("ledger") or data), str(p)
    return LedgerConfig(), None
