"""CLI commands for pathway exports.

Commands:
- init-db: Create the store schema
- export: Export every user's pathway (or one with --user), JSON or CSV
- export-user: Export one user's pathway as JSON
- stats: Compute corpus statistics
- run: Statistics, full JSON export and CSV export in one pass
"""

from pathlib import Path
from typing import NoReturn

import structlog
import typer
from rich.console import Console
from rich.table import Table

from pathways.config.app_config import SUPPORTED_FORMATS, AppConfig, load_app_config
from pathways.core.exporter import (
    export_stats,
    export_user,
    export_with_format,
)
from pathways.db.database import StoreError, init_store, open_store
from pathways.db.records_repository import UserNotFoundError

logger = structlog.get_logger(__name__)

app = typer.Typer(
    name="pathways",
    help="Export learner pathways (roadmaps, checkpoints, quizzes) and statistics.",
    no_args_is_help=True,
)

console = Console()


def _load_config(db: str | None, output_dir: str | None) -> AppConfig:
    """Load config and apply command-line overrides."""
    config = load_app_config(force_reload=True)
    if db:
        config.store.db_path = Path(db).expanduser()
    if output_dir:
        config.export.output_dir = Path(output_dir).expanduser()
    return config


def _fail(message: str, **context) -> NoReturn:
    logger.error("cli.failed", message=message, **context)
    console.print(f"[red]✗ {message}[/red]")
    raise typer.Exit(code=1)


# =============================================================================
# COMMANDS
# =============================================================================


@app.command(name="init-db")
def init_db(
    db: str | None = typer.Option(None, "--db", help="Path to SQLite database"),
) -> None:
    """Create the store schema if it does not exist."""
    config = _load_config(db, None)

    try:
        path = init_store(config.store.db_path)
    except (StoreError, OSError) as e:
        _fail(f"Could not initialize store: {e}")

    console.print(f"[green]✓ Store ready:[/green] {path}")


@app.command()
def export(
    fmt: str | None = typer.Option(
        None, "--format", "-f", help="Output format: json or csv (csv also writes json)"
    ),
    user: str | None = typer.Option(None, "--user", "-u", help="Export only this user id"),
    db: str | None = typer.Option(None, "--db", help="Path to SQLite database"),
    output_dir: str | None = typer.Option(None, "--output-dir", "-o", help="Exports directory"),
) -> None:
    """Export learner pathways."""
    config = _load_config(db, output_dir)
    effective_format = fmt or config.export.default_format

    if effective_format not in SUPPORTED_FORMATS:
        _fail(f"Unsupported format: {effective_format}")

    console.print(f"[blue]Exporting pathways ({effective_format})...[/blue]")

    try:
        with open_store(
            config.store.db_path,
            timeout=config.store.timeout_seconds,
            read_only=True,
        ) as conn:
            result = export_with_format(
                conn,
                config.export.output_dir,
                fmt=effective_format,
                user_id=user,
            )
    except UserNotFoundError as e:
        _fail(str(e), user_id=e.user_id)
    except StoreError as e:
        _fail(f"Store error: {e}")
    except (OSError, UnicodeEncodeError) as e:
        _fail(f"Could not write export: {e}")

    if user is not None:
        console.print(f"[green]✓ Exported pathway for {result.document.name}[/green]")
    else:
        console.print(f"[green]✓ Exported {result.document.total_users} users[/green]")
    for path in result.paths:
        console.print(f"  [dim]path:[/dim] {path}")


@app.command(name="export-user")
def export_user_command(
    user_id: str = typer.Argument(..., help="User id to export"),
    db: str | None = typer.Option(None, "--db", help="Path to SQLite database"),
    output_dir: str | None = typer.Option(None, "--output-dir", "-o", help="Exports directory"),
) -> None:
    """Export one user's pathway as JSON."""
    config = _load_config(db, output_dir)

    try:
        with open_store(
            config.store.db_path,
            timeout=config.store.timeout_seconds,
            read_only=True,
        ) as conn:
            result = export_user(conn, user_id, config.export.output_dir)
    except UserNotFoundError as e:
        _fail(str(e), user_id=e.user_id)
    except StoreError as e:
        _fail(f"Store error: {e}")
    except (OSError, UnicodeEncodeError) as e:
        _fail(f"Could not write export: {e}")

    document = result.document
    console.print(f"[green]✓ Exported pathway for {document.name}[/green]")
    console.print(f"  [dim]roadmaps:[/dim] {len(document.roadmaps)}")
    console.print(f"  [dim]path:[/dim]     {result.paths[0]}")


@app.command()
def stats(
    db: str | None = typer.Option(None, "--db", help="Path to SQLite database"),
    output_dir: str | None = typer.Option(None, "--output-dir", "-o", help="Exports directory"),
) -> None:
    """Compute pathway statistics."""
    config = _load_config(db, output_dir)

    try:
        with open_store(
            config.store.db_path,
            timeout=config.store.timeout_seconds,
            read_only=True,
        ) as conn:
            result = export_stats(conn, config.export.output_dir)
    except StoreError as e:
        _fail(f"Store error: {e}")
    except (OSError, UnicodeEncodeError) as e:
        _fail(f"Could not write statistics: {e}")

    data = result.stats.to_dict()

    table = Table(title="Pathway statistics")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for name, value in data["totals"].items():
        table.add_row(name, str(value))
    for name, value in data["performance"].items():
        table.add_row(name, value)
    console.print(table)

    if data["domainDistribution"]:
        console.print("\n[bold]Domains:[/bold]")
        for entry in data["domainDistribution"]:
            console.print(f"  {entry['domain'] or '(none)'}: {entry['count']}")

    console.print(f"\n  [dim]path:[/dim] {result.path}")


@app.command()
def run(
    db: str | None = typer.Option(None, "--db", help="Path to SQLite database"),
    output_dir: str | None = typer.Option(None, "--output-dir", "-o", help="Exports directory"),
) -> None:
    """Write statistics, the full JSON export and the CSV export in one pass."""
    config = _load_config(db, output_dir)

    console.print("[blue]Starting pathway export run...[/blue]")

    try:
        with open_store(
            config.store.db_path,
            timeout=config.store.timeout_seconds,
            read_only=True,
        ) as conn:
            stats_result = export_stats(conn, config.export.output_dir)
            export_result = export_with_format(conn, config.export.output_dir, fmt="csv")
    except StoreError as e:
        _fail(f"Store error: {e}")
    except (OSError, UnicodeEncodeError) as e:
        _fail(f"Could not write export: {e}")

    logger.info("cli.run_completed", total_users=export_result.document.total_users)

    console.print(f"[green]✓ Exported {export_result.document.total_users} users[/green]")
    for path in [stats_result.path, *export_result.paths]:
        console.print(f"  [dim]path:[/dim] {path}")


if __name__ == "__main__":
    app()
