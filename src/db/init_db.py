from __future__ import annotations

from typing import Optional

from src.spendbook.ledger.config import LedgerConfig
from src.spendbook.ledger.repository import LedgerRepository
from src.spendbook.ledger.store import SqlStore


def init_db(config: Optional[LedgerConfig] = None) -> SqlStore:
    cfg = config or LedgerConfig()
    store = SqlStore(url=cfg.resolved_database_url())
    store.create_schema()
    # First-run bootstrapping: built-in categories, only if the collection was never written.
    LedgerRepository(store, cfg).seed_default_categories()
    return store
