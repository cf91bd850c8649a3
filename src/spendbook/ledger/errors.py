from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class LedgerErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_NAME = "DUPLICATE_NAME"
    IN_USE = "IN_USE"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_INPUT = "INVALID_INPUT"
    PARSE_ERROR = "PARSE_ERROR"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"


class StoreCorruptError(RuntimeError):
    """Persisted collection could not be decoded; not recoverable by the ledger itself."""

    def __init__(self, collection: str, cause: Exception):
        super().__init__(f"Stored collection {collection!r} is not valid JSON: {cause}")
        self.collection = collection
        self.cause = cause


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of a ledger operation that may be rejected.

    Rejections (not found, duplicate name, category in use, bad amount, ...) are ordinary
    outcomes, not exceptions. Truthiness mirrors `ok` so callers can write `if ledger.delete_expense(x):`.
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[LedgerErrorCode] = None
    message: str = ""

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Any = None, message: str = "") -> "Outcome[Any]":
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failure(cls, error: LedgerErrorCode, message: str) -> "Outcome[Any]":
        return cls(ok=False, error=error, message=message)
