from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from src.cli import app
from src.db.models import LedgerCollection
from src.db.session import session_factory
from src.spendbook.ledger.budgets import BudgetRepository
from src.spendbook.ledger.repository import LedgerRepository
from src.spendbook.ledger.store import EXPENSES, SqlStore

runner = CliRunner()


@pytest.fixture()
def db_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    url = f"sqlite:///{tmp_path / 'data' / 'spendbook.db'}"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("SPENDBOOK_DATABASE_URL", url)
    monkeypatch.delenv("SPENDBOOK_CONFIG", raising=False)
    return url


def _ledger(url: str) -> LedgerRepository:
    return LedgerRepository(SqlStore(url=url))


def _food_id(url: str) -> str:
    return next(c.id for c in _ledger(url).get_categories() if c.name == "Food")


def test_init_db_seeds_defaults(db_url: str) -> None:
    res = runner.invoke(app, ["init-db"])
    assert res.exit_code == 0, res.output
    assert "Database ready" in res.output
    names = [c.name for c in _ledger(db_url).get_categories()]
    assert names == ["Food", "Transport", "Utilities", "Entertainment", "Other"]

    # Running again does not duplicate the defaults.
    assert runner.invoke(app, ["init-db"]).exit_code == 0
    assert len(_ledger(db_url).get_categories()) == 5


def test_add_list_and_delete(db_url: str) -> None:
    runner.invoke(app, ["init-db"])
    food = _food_id(db_url)

    res = runner.invoke(
        app,
        ["ledger", "add", "--amount", "12.50", "--category", food, "--date", "2024-03-02", "--description", "Lunch"],
    )
    assert res.exit_code == 0, res.output
    expenses = _ledger(db_url).get_expenses()
    assert len(expenses) == 1
    assert (expenses[0].amount, expenses[0].description) == (12.5, "Lunch")

    listed = runner.invoke(app, ["ledger", "list"])
    assert listed.exit_code == 0
    assert "Lunch" in listed.output
    assert "$12.50" in listed.output

    dash = runner.invoke(app, ["ledger", "dashboard"])
    assert "2024-03" in dash.output
    assert "Food" in dash.output

    gone = runner.invoke(app, ["ledger", "delete", expenses[0].id])
    assert gone.exit_code == 0
    assert _ledger(db_url).get_expenses() == []


def test_add_rejects_bad_amount(db_url: str) -> None:
    runner.invoke(app, ["init-db"])
    res = runner.invoke(app, ["ledger", "add", "--amount", "-3", "--category", _food_id(db_url), "--date", "2024-03-02"])
    assert res.exit_code == 1
    assert "positive number" in res.output
    assert _ledger(db_url).get_expenses() == []


def test_quick_add_uses_today(db_url: str) -> None:
    runner.invoke(app, ["init-db"])
    res = runner.invoke(app, ["ledger", "quick-add", "Coffee", "3.75", "--category", _food_id(db_url)])
    assert res.exit_code == 0, res.output
    assert 'Quick expense added: 3.75 for "Coffee" (Food)' in res.output
    assert _ledger(db_url).get_expenses()[0].description == "Coffee"


def test_analytics_reversed_range(db_url: str) -> None:
    res = runner.invoke(app, ["ledger", "analytics", "--start", "2024-03-31", "--end", "2024-03-01"])
    assert res.exit_code == 1
    assert "End date cannot be before start date." in res.output


def test_category_delete_in_use(db_url: str) -> None:
    runner.invoke(app, ["init-db"])
    food = _food_id(db_url)
    runner.invoke(app, ["ledger", "add", "--amount", "5", "--category", food, "--date", "2024-03-02"])
    res = runner.invoke(app, ["ledger", "categories", "delete", food])
    assert res.exit_code == 1
    assert _food_id(db_url) == food

    dup = runner.invoke(app, ["ledger", "categories", "add", "food"])
    assert dup.exit_code == 1


def test_budgets_save_and_show(db_url: str) -> None:
    runner.invoke(app, ["init-db"])
    food = _food_id(db_url)
    res = runner.invoke(app, ["ledger", "budgets", "save", f"{food}=150"])
    assert res.exit_code == 0, res.output
    assert "Budgets saved successfully!" in res.output
    assert BudgetRepository(SqlStore(url=db_url)).get_budgets() == {food: 150.0}

    again = runner.invoke(app, ["ledger", "budgets", "save", f"{food}=150"])
    assert "No changes detected" in again.output

    bad = runner.invoke(app, ["ledger", "budgets", "save", f"{food}=-1"])
    assert bad.exit_code == 1

    shown = runner.invoke(app, ["ledger", "budgets", "show"])
    assert "Food" in shown.output


def test_export_then_import(db_url: str, tmp_path: Path) -> None:
    runner.invoke(app, ["init-db"])
    runner.invoke(app, ["ledger", "add", "--amount", "9", "--category", _food_id(db_url), "--date", "2024-03-02"])
    out = tmp_path / "backup.json"
    assert runner.invoke(app, ["ledger", "export", "--out", str(out)]).exit_code == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert len(data["expenses"]) == 1

    runner.invoke(app, ["ledger", "delete", data["expenses"][0]["id"]])
    res = runner.invoke(app, ["ledger", "import", str(out)])
    assert res.exit_code == 0, res.output
    assert len(_ledger(db_url).get_expenses()) == 1


def test_import_bad_file_exits_2(db_url: str, tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    res = runner.invoke(app, ["ledger", "import", str(bad)])
    assert res.exit_code == 2
    assert "Failed to import data." in res.output


def test_corrupt_store_exits_2(db_url: str) -> None:
    runner.invoke(app, ["init-db"])
    with session_factory(db_url)() as session:
        session.merge(LedgerCollection(name=EXPENSES, payload="{broken"))
        session.commit()
    res = runner.invoke(app, ["ledger", "list"])
    assert res.exit_code == 2
    assert "corrupt" in res.output
