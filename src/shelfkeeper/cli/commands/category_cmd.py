# ABOUTME: The `shelfkeeper category` command group for managing categories.
# ABOUTME: Provides ls, add, rename, and rm subcommands.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shelfkeeper.cli.options import open_database, seed_option, store_option
from shelfkeeper.db.catalog import LibraryCatalog


@click.group("category")
def category() -> None:
    """Manage book categories."""


@category.command("ls")
@store_option
@seed_option
def category_ls(store_dir: Path | None, seed_location: str | None) -> None:
    """List all categories."""
    console = Console()
    with open_database(store_dir, seed_location, console) as db:
        categories = LibraryCatalog(db).get_all_categories()

    if not categories:
        console.print("[yellow]No categories in the library.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Category", style="cyan")
    for cat in categories:
        table.add_row(str(cat.id), cat.name)
    console.print(table)


@category.command("add")
@click.argument("name")
@store_option
@seed_option
def category_add(name: str, store_dir: Path | None, seed_location: str | None) -> None:
    """Create a category."""
    console = Console()
    with open_database(store_dir, seed_location, console) as db:
        category_id = LibraryCatalog(db).add_category(name)
    console.print(f"Added category [cyan]{name}[/cyan] ({category_id}).")


@category.command("rename")
@click.argument("category_id", type=int)
@click.argument("new_name")
@store_option
@seed_option
def category_rename(
    category_id: int, new_name: str, store_dir: Path | None, seed_location: str | None
) -> None:
    """Rename a category and refile its books under the new name."""
    console = Console()
    with open_database(store_dir, seed_location, console) as db:
        LibraryCatalog(db).update_category(category_id, new_name)
    console.print(f"Renamed category {category_id} to [cyan]{new_name}[/cyan].")


@category.command("rm")
@click.argument("category_id", type=int)
@store_option
@seed_option
def category_rm(category_id: int, store_dir: Path | None, seed_location: str | None) -> None:
    """Delete a category no book uses."""
    console = Console()
    with open_database(store_dir, seed_location, console) as db:
        LibraryCatalog(db).delete_category(category_id)
    console.print(f"Removed category {category_id}.")
