from __future__ import annotations

import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.spendbook.ledger.budgets import BudgetRepository
from src.spendbook.ledger.config import LedgerConfig
from src.spendbook.ledger.repository import LedgerRepository
from src.spendbook.ledger.store import MemoryStore, SqlStore


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def sql_store() -> SqlStore:
    engine = create_engine("sqlite:///:memory:", future=True)
    s = SqlStore(engine)
    s.create_schema()
    return s


@pytest.fixture()
def ledger(store: MemoryStore) -> LedgerRepository:
    return LedgerRepository(store, LedgerConfig())


@pytest.fixture()
def budgets(store: MemoryStore) -> BudgetRepository:
    return BudgetRepository(store)
