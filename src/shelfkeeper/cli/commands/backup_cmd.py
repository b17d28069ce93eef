# ABOUTME: Backup commands: `export`, `restore`, and `reset`.
# ABOUTME: Writes the database to a backup file, replaces it from one, or wipes it.

from pathlib import Path

import click
from rich.console import Console

from shelfkeeper.cli.options import open_database, seed_option, store_option
from shelfkeeper.core.backup import export_backup, restore_backup
from shelfkeeper.db.catalog import LibraryCatalog


@click.command("export")
@click.argument("dest", type=click.Path(path_type=Path), required=False)
@click.option("--overwrite", is_flag=True, default=False, help="Replace an existing backup file.")
@store_option
@seed_option
def export(
    dest: Path | None, overwrite: bool, store_dir: Path | None, seed_location: str | None
) -> None:
    """Write a backup of the library database."""
    console = Console()
    with open_database(store_dir, seed_location, console) as db:
        path = export_backup(db, dest, overwrite=overwrite)
    console.print(f"Backup written to [bold]{path}[/bold].")


@click.command("restore")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.confirmation_option(prompt="This replaces the whole library. Continue?")
@store_option
@seed_option
def restore(source: Path, store_dir: Path | None, seed_location: str | None) -> None:
    """Replace the library database with a backup file."""
    console = Console()
    with open_database(store_dir, seed_location, console) as db:
        result = restore_backup(db, source)

    console.print(f"Restored {result.size} bytes from [bold]{result.source}[/bold].")
    if not result.schema_current:
        console.print(
            "[yellow]Backup is missing tables "
            f"({', '.join(result.missing_tables)}); the seed will be reloaded next start.[/yellow]"
        )


@click.command("reset")
@click.confirmation_option(prompt="Delete every book, loan, category and setting?")
@store_option
@seed_option
def reset(store_dir: Path | None, seed_location: str | None) -> None:
    """Wipe all library data, including the demo rows."""
    console = Console()
    with open_database(store_dir, seed_location, console) as db:
        LibraryCatalog(db).reset_to_fresh()
    console.print("Library cleared.")
