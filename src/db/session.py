from __future__ import annotations

import os
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

DEFAULT_DATABASE_URL = "sqlite:///./data/spendbook.db"


def get_database_url() -> str:
    return os.environ.get("SPENDBOOK_DATABASE_URL", DEFAULT_DATABASE_URL)


_ENGINES: dict[str, Engine] = {}


def _ensure_sqlite_dir(url: str) -> None:
    if not url.startswith("sqlite:///") or url.endswith(":memory:"):
        return
    Path(url.replace("sqlite:///", "", 1)).parent.mkdir(parents=True, exist_ok=True)


def get_engine(url: str | None = None) -> Engine:
    url = url or get_database_url()
    engine = _ENGINES.get(url)
    if engine is not None:
        return engine
    _ensure_sqlite_dir(url)
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    engine = create_engine(url, future=True, connect_args=connect_args)
    _ENGINES[url] = engine
    return engine


def session_factory(url: str | None = None, *, engine: Engine | None = None) -> sessionmaker[Session]:
    return sessionmaker(bind=engine or get_engine(url), class_=Session, autoflush=False, autocommit=False)

