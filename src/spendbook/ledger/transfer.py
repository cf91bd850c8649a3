from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from src.spendbook.ledger.errors import LedgerErrorCode, Outcome
from src.spendbook.ledger.models import ImportResult
from src.spendbook.ledger.store import BUDGETS, CATEGORIES, EXPENSES, Store

log = logging.getLogger(__name__)


def export_data(store: Store) -> dict[str, Any]:
    return {
        EXPENSES: store.read(EXPENSES),
        CATEGORIES: store.read(CATEGORIES),
        BUDGETS: store.read(BUDGETS),
    }


def export_json(store: Store) -> str:
    return json.dumps(export_data(store), indent=2, ensure_ascii=False)


def import_data(store: Store, payload: str) -> Outcome[ImportResult]:
    """
    Replace collections from an export payload.

    A payload that is not a JSON object fails as a whole and nothing is written. Otherwise every
    collection is checked on its own: `expenses`/`categories` must be lists, `budgets` a mapping.
    Keys that are missing or mis-shaped are skipped and leave their collection untouched.
    """
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, TypeError) as e:
        log.warning("Import payload is not valid JSON: %s", e)
        return Outcome.failure(LedgerErrorCode.PARSE_ERROR, f"Import file is not valid JSON: {e}")
    if not isinstance(data, dict):
        return Outcome.failure(LedgerErrorCode.PARSE_ERROR, "Import file must contain a JSON object.")

    applied: list[str] = []
    skipped: list[str] = []
    for name in (EXPENSES, CATEGORIES):
        value = data.get(name)
        if isinstance(value, list):
            store.write(name, value)
            applied.append(name)
        else:
            skipped.append(name)
    budgets = data.get(BUDGETS)
    if isinstance(budgets, dict):
        store.write(BUDGETS, budgets)
        applied.append(BUDGETS)
    else:
        skipped.append(BUDGETS)

    log.info("Data imported: applied=%s skipped=%s", applied, skipped)
    return Outcome.success(ImportResult(applied=applied, skipped=skipped))


def read_import_file(path: Path) -> Outcome[str]:
    try:
        return Outcome.success(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        log.warning("Could not read import file %s: %s", path, e)
        return Outcome.failure(LedgerErrorCode.PARSE_ERROR, f"Could not read import file {path}: {e}")


def import_file(store: Store, path: Path) -> Outcome[ImportResult]:
    text = read_import_file(path)
    if not text:
        return Outcome.failure(LedgerErrorCode.PARSE_ERROR, text.message)
    return import_data(store, text.value or "")
