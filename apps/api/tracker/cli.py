"""Command-line interface for the tracker database: migrations and audit."""

import logging
import os
import sqlite3

import click
from alembic.util import CommandError
from sqlalchemy.exc import SQLAlchemyError

from tracker.core import migrate as migrations
from tracker.core.db import get_database_url, resolve_sqlite_path
from tracker.modules.audit.service import audit_report, format_report, report_json


def _setup_logging() -> None:
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            format="%(levelname)s [%(name)s] %(message)s",
        )


@click.group()
@click.version_option(package_name="boardgame-tracker")
@click.option(
    "--database-url",
    envvar="DATABASE_URL",
    default=None,
    help="SQLAlchemy sqlite URL (default: DATABASE_URL or ./data/board-game-tracker.db).",
)
@click.pass_context
def cli(ctx: click.Context, database_url: str | None) -> None:
    """Board game tracker database tools.

    Apply schema migrations, inspect the migration ledger and audit the
    live schema against the declared row types.
    """
    _setup_logging()
    ctx.obj = {"database_url": database_url or get_database_url()}


@cli.command()
@click.option("--to", "revision", default="head", show_default=True, help="Target revision.")
@click.pass_obj
def migrate(obj: dict, revision: str) -> None:
    """Apply pending schema migrations.

    Each revision runs in its own transaction; a failing step is rolled
    back and the command exits non-zero.
    """
    url = obj["database_url"]
    click.echo(f"Database: {resolve_sqlite_path(url) or url}")
    try:
        applied = migrations.upgrade(url, revision=revision)
    except (SQLAlchemyError, CommandError) as e:
        raise click.ClickException(f"Migration failed: {e}")

    if not applied:
        click.echo(f"Already at {migrations.current_revision(url) or 'base'}, nothing to do.")
        return
    for rev in applied:
        click.echo(f"Applied {rev}")
    click.echo(click.style(f"Migration complete ({len(applied)} step(s)).", fg="green"))


@cli.command()
@click.pass_obj
def current(obj: dict) -> None:
    """Show the applied head revision."""
    click.echo(migrations.current_revision(obj["database_url"]) or "(none)")


@cli.command()
@click.pass_obj
def history(obj: dict) -> None:
    """List all revisions, oldest first, marking the applied ones."""
    for rev in migrations.revision_history(obj["database_url"]):
        mark = "x" if rev["applied"] else " "
        click.echo(f"[{mark}] {rev['revision']}  {rev['doc'] or ''}")


@cli.command()
@click.option(
    "--types-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Source file scanned for `export interface` blocks (default: AUDIT_TYPES_PATH).",
)
@click.option("--from-models", is_flag=True, help="Compare against the SQLModel row models.")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON.")
@click.pass_obj
def audit(obj: dict, types_file: str | None, from_models: bool, as_json: bool) -> None:
    """Report drift between the live schema and the declared row types.

    Read-only. Findings never change the exit status; only an unreadable
    database file does.
    """
    try:
        report = audit_report(obj["database_url"], types_path=types_file, from_models=from_models)
    except sqlite3.OperationalError as e:
        raise click.ClickException(f"Cannot open database: {e}")

    click.echo(report_json(report) if as_json else format_report(report))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
