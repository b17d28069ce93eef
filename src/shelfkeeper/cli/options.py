# ABOUTME: Shared Click options and helpers for Shelfkeeper CLI commands.
# ABOUTME: Provides the --store/--seed flags and opens an initialized database from them.

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click
from rich.console import Console

from shelfkeeper.db.catalog import CatalogError
from shelfkeeper.db.engine import Database, DatabaseError
from shelfkeeper.db.seed import seed_from_location
from shelfkeeper.db.storage import DEFAULT_STORE_DIR, FileStorage

store_option = click.option(
    "--store",
    "store_dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="SHELFKEEPER_STORE",
    default=None,
    help=f"Directory holding the library database (default: {DEFAULT_STORE_DIR})",
)

seed_option = click.option(
    "--seed",
    "seed_location",
    envvar="SHELFKEEPER_SEED",
    default=None,
    help="Seed database file or URL used on first run (default: bundled demo seed).",
)


@contextmanager
def open_database(
    store_dir: Path | None, seed_location: str | None, console: Console
) -> Iterator[Database]:
    """Initialize the database from the CLI options and yield it.

    Domain and engine errors are printed in red and turned into exit status 1.
    The database is closed on the way out either way.
    """
    db = Database(FileStorage(store_dir or DEFAULT_STORE_DIR), seed_from_location(seed_location))
    try:
        db.initialize()
        yield db
    except (CatalogError, DatabaseError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc
    finally:
        db.close()
