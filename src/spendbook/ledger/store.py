from __future__ import annotations

import json
import logging
import threading
from typing import Any, Protocol

from sqlalchemy.engine import Engine

from src.db.models import Base, LedgerCollection
from src.db.session import get_engine, session_factory
from src.spendbook.ledger.errors import StoreCorruptError
from src.utils.time import utcnow

log = logging.getLogger(__name__)

EXPENSES = "expenses"
CATEGORIES = "categories"
BUDGETS = "budgets"

COLLECTIONS = (EXPENSES, CATEGORIES, BUDGETS)


def empty_value(collection: str) -> Any:
    if collection == BUDGETS:
        return {}
    if collection in (EXPENSES, CATEGORIES):
        return []
    raise ValueError(f"Unknown collection: {collection}")


def _encode(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _decode(collection: str, payload: str) -> Any:
    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        raise StoreCorruptError(collection, e) from e


class Store(Protocol):
    """Whole-collection persistence: read everything, write everything, nothing in between."""

    def read(self, collection: str) -> Any: ...

    def write(self, collection: str, value: Any) -> None: ...

    def has(self, collection: str) -> bool: ...


class MemoryStore:
    """Keeps serialized JSON text per collection so readers never share objects with writers."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._lock = threading.Lock()
        self._data: dict[str, str] = {}
        for name, value in (initial or {}).items():
            empty_value(name)
            self._data[name] = _encode(value)

    def read(self, collection: str) -> Any:
        fallback = empty_value(collection)
        with self._lock:
            payload = self._data.get(collection)
        if payload is None:
            return fallback
        return _decode(collection, payload)

    def write(self, collection: str, value: Any) -> None:
        empty_value(collection)
        payload = _encode(value)
        with self._lock:
            self._data[collection] = payload

    def has(self, collection: str) -> bool:
        with self._lock:
            return collection in self._data


class SqlStore:
    """
    Store backed by the `ledger_collections` table.

    Each write runs in its own committed transaction, so a collection is either fully replaced or untouched.
    """

    def __init__(self, engine: Engine | None = None, *, url: str | None = None):
        self._engine = engine or get_engine(url)
        self._sessions = session_factory(engine=self._engine)
        self._lock = threading.Lock()

    def create_schema(self) -> None:
        Base.metadata.create_all(bind=self._engine)

    def read(self, collection: str) -> Any:
        fallback = empty_value(collection)
        with self._lock, self._sessions() as session:
            row = session.get(LedgerCollection, collection)
            payload = row.payload if row is not None else None
        if payload is None:
            return fallback
        return _decode(collection, payload)

    def write(self, collection: str, value: Any) -> None:
        empty_value(collection)
        payload = _encode(value)
        with self._lock, self._sessions() as session:
            row = session.get(LedgerCollection, collection)
            if row is None:
                row = LedgerCollection(name=collection, payload=payload)
                session.add(row)
            row.payload = payload
            row.updated_at = utcnow()
            session.commit()
        log.debug("Wrote collection %s (%d bytes)", collection, len(payload))

    def has(self, collection: str) -> bool:
        with self._lock, self._sessions() as session:
            return session.get(LedgerCollection, collection) is not None
