from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from src.db.init_db import init_db
from src.spendbook.ledger.budgets import BudgetRepository
from src.spendbook.ledger.config import LedgerConfig, load_ledger_config
from src.spendbook.ledger.errors import Outcome, StoreCorruptError
from src.spendbook.ledger.inputs import parse_budget_inputs, parse_expense_input, parse_quick_add
from src.spendbook.ledger.models import CategoryDraft
from src.spendbook.ledger.reports import (
    render_analytics,
    render_budget_page,
    render_categories,
    render_dashboard,
    render_expenses,
)
from src.spendbook.ledger.repository import LedgerRepository
from src.spendbook.ledger.store import COLLECTIONS
from src.spendbook.ledger.transfer import export_json, import_file
from src.spendbook.ledger.views import analytics, budget_page, dashboard, expense_list
from src.utils.time import local_today

ledger_app = typer.Typer(help="Expense ledger: record expenses, manage categories and budgets, view analytics.")
categories_app = typer.Typer(help="Manage categories.")
budgets_app = typer.Typer(help="Manage per-category budgets.")
ledger_app.add_typer(categories_app, name="categories")
ledger_app.add_typer(budgets_app, name="budgets")


def _open() -> tuple[LedgerConfig, LedgerRepository, BudgetRepository]:
    load_dotenv()
    cfg_path = os.environ.get("SPENDBOOK_CONFIG", "").strip()
    cfg, _ = load_ledger_config(Path(cfg_path) if cfg_path else None)
    logging.basicConfig(level=getattr(logging, cfg.log_level.upper(), logging.WARNING))
    try:
        store = init_db(cfg)
        for name in COLLECTIONS:
            store.read(name)
    except StoreCorruptError as e:
        typer.echo(f"Data store is corrupt: {e}", err=True)
        raise typer.Exit(code=2)
    return cfg, LedgerRepository(store, cfg), BudgetRepository(store)


def _require(outcome: Outcome) -> None:
    if not outcome:
        typer.echo(outcome.message, err=True)
        raise typer.Exit(code=1)


def _echo_json(value) -> None:
    typer.echo(json.dumps(value, indent=2, ensure_ascii=False, default=str))


@ledger_app.command("add")
def add_cmd(
    amount: str = typer.Option(..., help="Amount (positive number)"),
    category: str = typer.Option(..., help="Category id"),
    date: str = typer.Option("", help="YYYY-MM-DD (defaults to today)"),
    description: str = typer.Option("", help="Optional description"),
    notes: str = typer.Option("", help="Optional notes"),
):
    cfg, ledger, _ = _open()
    parsed = parse_expense_input(
        amount=amount,
        date=date.strip() or local_today().isoformat(),
        category_id=category,
        description=description,
        notes=notes,
    )
    _require(parsed)
    res = ledger.add_expense(parsed.value)
    _require(res)
    _echo_json(res.value.to_record())


@ledger_app.command("quick-add")
def quick_add_cmd(
    description: str = typer.Argument(..., help="What the money was spent on"),
    amount: str = typer.Argument(..., help="Amount (positive number)"),
    category: str = typer.Option(..., help="Category id"),
):
    cfg, ledger, _ = _open()
    parsed = parse_quick_add(description=description, amount=amount, category_id=category, today=local_today())
    _require(parsed)
    res = ledger.add_expense(parsed.value)
    _require(res)
    cat = ledger.get_category_by_id(category)
    typer.echo(f'Quick expense added: {res.value.amount:.2f} for "{res.value.description}" ({cat.name if cat else "Unknown"})')


@ledger_app.command("edit")
def edit_cmd(
    expense_id: str = typer.Argument(...),
    amount: Optional[str] = typer.Option(None),
    category: Optional[str] = typer.Option(None),
    date: Optional[str] = typer.Option(None),
    description: Optional[str] = typer.Option(None),
    notes: Optional[str] = typer.Option(None),
):
    cfg, ledger, _ = _open()
    current = ledger.get_expense_by_id(expense_id)
    if current is None:
        typer.echo("Expense not found.", err=True)
        raise typer.Exit(code=1)
    # Options left out keep their current value; the update itself always replaces every field.
    parsed = parse_expense_input(
        amount=current.amount if amount is None else amount,
        date=current.date if date is None else date,
        category_id=current.category_id if category is None else category,
        description=current.description if description is None else description,
        notes=current.notes if notes is None else notes,
    )
    _require(parsed)
    res = ledger.update_expense(expense_id, parsed.value)
    _require(res)
    _echo_json(res.value.to_record())


@ledger_app.command("delete")
def delete_cmd(expense_ids: list[str] = typer.Argument(..., help="One or more expense ids")):
    cfg, ledger, _ = _open()
    if len(expense_ids) == 1:
        _require(ledger.delete_expense(expense_ids[0]))
        typer.echo("Expense deleted.")
        return
    deleted = ledger.delete_expenses(expense_ids)
    if not deleted:
        typer.echo("Could not delete selected expenses.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{deleted} expense(s) deleted.")


@ledger_app.command("list")
def list_cmd(as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table")):
    cfg, ledger, _ = _open()
    rows = expense_list(ledger)
    if as_json:
        _echo_json([r.model_dump(by_alias=True) for r in rows])
        return
    typer.echo(render_expenses(rows, currency=cfg.currency))


@ledger_app.command("dashboard")
def dashboard_cmd(as_json: bool = typer.Option(False, "--json")):
    cfg, ledger, _ = _open()
    summary = dashboard(ledger)
    if as_json:
        _echo_json(summary.model_dump(by_alias=True))
        return
    typer.echo(render_dashboard(summary, currency=cfg.currency))


@ledger_app.command("analytics")
def analytics_cmd(
    start: str = typer.Option("", help="Start date YYYY-MM-DD"),
    end: str = typer.Option("", help="End date YYYY-MM-DD"),
    top: int = typer.Option(0, help="Descriptions to show before folding the rest into 'Other' (0 = config)"),
    as_json: bool = typer.Option(False, "--json"),
):
    cfg, ledger, _ = _open()
    res = analytics(ledger, start=start.strip() or None, end=end.strip() or None, top_n=top or None)
    _require(res)
    if as_json:
        _echo_json(res.value.model_dump(mode="json"))
        return
    typer.echo(render_analytics(res.value, currency=cfg.currency))


@ledger_app.command("export")
def export_cmd(out: Optional[Path] = typer.Option(None, dir_okay=False, help="Write to file instead of stdout")):
    cfg, ledger, _ = _open()
    payload = export_json(ledger.store)
    if out is None:
        typer.echo(payload)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(payload, encoding="utf-8")
    typer.echo(f"Data exported to {out}")


@ledger_app.command("import")
def import_cmd(file: Path = typer.Argument(..., dir_okay=False, help="JSON file from `export`")):
    cfg, ledger, _ = _open()
    res = import_file(ledger.store, file)
    if not res:
        typer.echo(f"Failed to import data. {res.message}", err=True)
        raise typer.Exit(code=2)
    typer.echo(f"Data imported: {', '.join(res.value.applied) or 'nothing applied'}")
    if res.value.skipped:
        typer.echo(f"Skipped (missing or wrong shape): {', '.join(res.value.skipped)}")


@categories_app.command("list")
def categories_list_cmd(as_json: bool = typer.Option(False, "--json")):
    cfg, ledger, _ = _open()
    cats = ledger.get_categories()
    if as_json:
        _echo_json([c.to_record() for c in cats])
        return
    typer.echo(render_categories(cats))


@categories_app.command("add")
def categories_add_cmd(
    name: str = typer.Argument(...),
    color: str = typer.Option("", help="Hex color, e.g. #FF6384"),
    icon: str = typer.Option("", help="Emoji icon"),
):
    cfg, ledger, _ = _open()
    res = ledger.add_category(CategoryDraft(name=name, color=color or None, icon=icon or None))
    _require(res)
    typer.echo(f'Category "{res.value.name}" added ({res.value.id}).')


@categories_app.command("edit")
def categories_edit_cmd(
    category_id: str = typer.Argument(...),
    name: Optional[str] = typer.Option(None),
    color: str = typer.Option(""),
    icon: str = typer.Option(""),
):
    cfg, ledger, _ = _open()
    current = ledger.get_category_by_id(category_id)
    if current is None:
        typer.echo("Category not found.", err=True)
        raise typer.Exit(code=1)
    res = ledger.update_category(category_id, CategoryDraft(name=name or current.name, color=color, icon=icon))
    _require(res)
    typer.echo(f'Category "{res.value.name}" updated.')


@categories_app.command("delete")
def categories_delete_cmd(category_id: str = typer.Argument(...)):
    cfg, ledger, _ = _open()
    _require(ledger.delete_category(category_id))
    typer.echo("Category deleted.")


@budgets_app.command("show")
def budgets_show_cmd(as_json: bool = typer.Option(False, "--json")):
    cfg, ledger, budgets = _open()
    page = budget_page(ledger, budgets)
    if as_json:
        _echo_json(page.model_dump())
        return
    typer.echo(render_budget_page(page, currency=cfg.currency))


@budgets_app.command("set")
def budgets_set_cmd(category_id: str = typer.Argument(...), amount: str = typer.Argument(...)):
    cfg, ledger, budgets = _open()
    res = budgets.set_budget_for_category(category_id, amount)
    _require(res)
    typer.echo(f"Budget set for {category_id}: {res.value:.2f}")


@budgets_app.command("clear")
def budgets_clear_cmd(category_id: str = typer.Argument(...)):
    cfg, ledger, budgets = _open()
    if budgets.delete_budget_for_category(category_id):
        typer.echo(f"Budget removed for {category_id}.")
    else:
        typer.echo(f"No budget was set for {category_id}.")


@budgets_app.command("save")
def budgets_save_cmd(
    entries: Optional[list[str]] = typer.Argument(None, help="CATEGORY_ID=AMOUNT pairs; CATEGORY_ID= (blank) removes"),
):
    """Save the budget form: every category not given an amount loses its budget."""
    cfg, ledger, budgets = _open()
    raw: dict[str, str] = {}
    for entry in entries or []:
        if "=" not in entry:
            raise typer.BadParameter(f"Expected CATEGORY_ID=AMOUNT, got {entry!r}")
        k, v = entry.split("=", 1)
        raw[k.strip()] = v
    parsed = parse_budget_inputs(raw)
    _require(parsed)
    if budgets.reconcile_budgets(ledger.get_categories(), parsed.value):
        typer.echo("Budgets saved successfully!")
    else:
        typer.echo("No changes detected in budgets.")
