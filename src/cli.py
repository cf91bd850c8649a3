from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from src.spendbook.ledger.cli import ledger_app

app = typer.Typer(help="Spendbook CLI")
app.add_typer(ledger_app, name="ledger")


def _check_runtime() -> None:
    try:
        import sqlalchemy  # noqa: F401
    except Exception as e:
        typer.echo(
            "Runtime dependency error: SQLAlchemy failed to import.\n"
            "Create a venv and install the project:\n"
            "  python -m venv .venv\n"
            "  source .venv/bin/activate\n"
            "  pip install -e .\n\n"
            f"Original error: {type(e).__name__}: {e}",
            err=True,
        )
        raise typer.Exit(code=1)


@app.command("init-db")
def init_db_cmd(
    config: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="spendbook.yaml override"),
):
    """Create the database schema and seed the default categories on first run."""
    load_dotenv()
    _check_runtime()
    from src.db.init_db import init_db
    from src.spendbook.ledger.config import load_ledger_config

    cfg_path = config or (Path(os.environ["SPENDBOOK_CONFIG"]) if os.environ.get("SPENDBOOK_CONFIG") else None)
    cfg, used = load_ledger_config(cfg_path)
    if used:
        typer.echo(f"Using config: {used}")
    init_db(cfg)
    typer.echo(f"Database ready at {cfg.resolved_database_url()}")


if __name__ == "__main__":
    app()
