from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from src.db.models import LedgerCollection
from src.spendbook.ledger.errors import StoreCorruptError
from src.spendbook.ledger.store import BUDGETS, CATEGORIES, EXPENSES, MemoryStore, SqlStore


def test_memory_store_defaults_when_absent() -> None:
    s = MemoryStore()
    assert s.read(EXPENSES) == []
    assert s.read(CATEGORIES) == []
    assert s.read(BUDGETS) == {}
    assert not s.has(EXPENSES)


def test_memory_store_returns_copies() -> None:
    s = MemoryStore()
    s.write(EXPENSES, [{"id": "a"}])
    got = s.read(EXPENSES)
    got.append({"id": "b"})
    assert s.read(EXPENSES) == [{"id": "a"}]
    assert s.has(EXPENSES)


def test_unknown_collection_is_rejected() -> None:
    s = MemoryStore()
    with pytest.raises(ValueError):
        s.write("accounts", [])


def test_sql_store_round_trip_preserves_order(sql_store: SqlStore) -> None:
    rows = [{"id": "z", "name": "Zed"}, {"id": "a", "name": "Ay"}]
    sql_store.write(CATEGORIES, rows)
    assert sql_store.read(CATEGORIES) == rows
    assert sql_store.has(CATEGORIES)
    assert not sql_store.has(EXPENSES)

    sql_store.write(CATEGORIES, [])
    assert sql_store.read(CATEGORIES) == []
    assert sql_store.has(CATEGORIES)


def test_sql_store_budgets_mapping(sql_store: SqlStore) -> None:
    assert sql_store.read(BUDGETS) == {}
    sql_store.write(BUDGETS, {"c1": 100.0, "c2": 0})
    assert sql_store.read(BUDGETS) == {"c1": 100.0, "c2": 0}


def test_sql_store_corrupt_payload_raises() -> None:
    engine = create_engine("sqlite:///:memory:", future=True)
    store = SqlStore(engine)
    store.create_schema()
    with Session(engine) as session:
        session.add(LedgerCollection(name=EXPENSES, payload="{not json"))
        session.commit()
    with pytest.raises(StoreCorruptError) as exc:
        store.read(EXPENSES)
    assert exc.value.collection == EXPENSES
