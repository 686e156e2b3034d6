"""
fm-dispatch — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (DB init, snapshot import, recommendation).
  5. Report result to stdout.

Install and run::

    pip install -e .
    fm-dispatch --help
    fm-dispatch init-db
    fm-dispatch validate-config
    fm-dispatch import-snapshot --file data/seed.json
    fm-dispatch recommend --work-order-id 42 --org-id 1
    fm-dispatch recommend --work-order-id 42 --org-id 1 --save
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="fm-dispatch",
    help="Work-order dispatch recommendations — local CLI.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from fm_dispatch.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from fm_dispatch.utils.logging import configure_logging
    configure_logging(config.logging)


def _database_config(config, db_path: Optional[str]):
    """Return the database section, with ``--db-path`` applied if given."""
    if db_path:
        return config.database.model_copy(update={"db_path": db_path})
    return config.database


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config (e.g. data/db/test.db).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Initialize the SQLite database and apply the full schema.

    Safe to run multiple times — all DDL uses IF NOT EXISTS.
    """
    from fm_dispatch.db.connection import open_database
    from fm_dispatch.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    database = _database_config(config, db_path)
    typer.echo(f"Initializing database at: {database.db_path}")

    with open_database(database) as conn:
        apply_schema(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:    {config.database.db_path}")
    typer.echo(f"  Top N:            {config.dispatch.top_n}")
    typer.echo(f"  Feedback window:  {config.dispatch.feedback_window_days}d")
    typer.echo(f"  Lookup workers:   {config.dispatch.lookup_concurrency}")
    typer.echo(
        f"  Embedded cache:   "
        f"{'on' if config.cache.enabled else 'off'} (ttl={config.cache.ttl_seconds}s, "
        f"CachedDispatchEngine only)"
    )
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("import-snapshot")
def import_snapshot(
    seed_file: str = typer.Option(
        ...,
        "--file",
        "-f",
        help="Path to a JSON seed document keyed by table name.",
    ),
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Validate the document but do not write to the database.",
    ),
) -> None:
    """Load organizations, assets, candidates and work orders from JSON.

    Uses UPSERT semantics — rows with an existing primary key are replaced.
    The schema is applied first, so this works on a fresh database.
    """
    from fm_dispatch.db.connection import MEMORY_DB, get_connection, open_database
    from fm_dispatch.db.repositories.seed_repo import SnapshotSeedRepository
    from fm_dispatch.db.schema import apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    seed_path = Path(seed_file)
    if not seed_path.exists():
        typer.echo(f"[ERROR] Seed file not found: {seed_path}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Loading snapshot from: {seed_path}")
    try:
        with open(seed_path, encoding="utf-8") as f:
            document = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        typer.echo(f"[ERROR] JSON parse error: {exc}", err=True)
        raise typer.Exit(code=1)

    if not isinstance(document, dict):
        typer.echo("[ERROR] Seed document must be a JSON object keyed by table.", err=True)
        raise typer.Exit(code=1)

    database = _database_config(config, db_path)
    # Dry runs validate against an in-memory copy of the schema.
    connect = get_connection(MEMORY_DB) if dry_run else open_database(database)

    try:
        with connect as conn:
            apply_schema(conn)
            repo = SnapshotSeedRepository(conn)
            counts = repo.validate(document) if dry_run else repo.load(document)
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    for table, n in counts.items():
        typer.echo(f"  {table}: {n} row(s)")

    if dry_run:
        typer.echo("[DRY RUN] No rows written to database.")
        return

    typer.echo("[OK] Snapshot imported.")


@app.command("recommend")
def recommend(
    work_order_id: int = typer.Option(..., "--work-order-id", help="Work order to dispatch."),
    organization_id: int = typer.Option(..., "--org-id", help="Requesting organization."),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the response as JSON instead of a table.",
    ),
    save: bool = typer.Option(
        False,
        "--save",
        help="Also write the response to a JSON file in dispatch.output_dir.",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output",
        help="Write the response JSON to this directory instead (implies --save).",
    ),
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Score, rank and recommend an assignee for one work order."""
    from fm_dispatch.dispatch.engine import DispatchEngine
    from fm_dispatch.dispatch.reporter import format_recommendation, write_recommendation_json
    from fm_dispatch.errors import DispatchError
    from fm_dispatch.snapshot.sqlite import SqliteSnapshotProvider

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    database = _database_config(config, db_path)
    if not Path(database.db_path).exists():
        typer.echo(
            f"[ERROR] Database not found: {database.db_path}. Run init-db first.", err=True
        )
        raise typer.Exit(code=1)

    engine = DispatchEngine(SqliteSnapshotProvider(database), config)

    try:
        result = engine.recommend_sync(work_order_id, organization_id)
    except DispatchError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        typer.echo(format_recommendation(result))

    if save or output_dir:
        path = write_recommendation_json(
            result, Path(output_dir or config.dispatch.output_dir)
        )
        typer.echo(f"  Written: {path}", err=as_json)


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
