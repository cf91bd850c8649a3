from __future__ import annotations

import datetime as dt

try:
    from sqlalchemy import DateTime, String, Text
    from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
except Exception as e:  # pragma: no cover
    raise RuntimeError(
        "Failed to import SQLAlchemy.\n\n"
        "Fix:\n"
        "  1) Use Python 3.11+ with SQLAlchemy 2.x.\n"
        "  2) Create a virtualenv and install the project:\n"
        "     python -m venv .venv\n"
        "     source .venv/bin/activate\n"
        "     pip install -e .\n\n"
        f"Original error: {type(e).__name__}: {e}"
    ) from e

from src.utils.time import utcnow


class Base(DeclarativeBase):
    pass


class LedgerCollection(Base):
    """
    One row per stored collection (expenses, categories, budgets).

    The payload is the whole collection serialized as JSON text; writes replace it wholesale.
    """

    __tablename__ = "ledger_collections"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
