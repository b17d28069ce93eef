# ABOUTME: The `shelfkeeper add` command for adding books to the catalogue.
# ABOUTME: Creates a new title or merges copies into an existing title+ISBN match.

from pathlib import Path

import click
from rich.console import Console

from shelfkeeper.cli.options import open_database, seed_option, store_option
from shelfkeeper.db.catalog import LibraryCatalog


@click.command("add")
@click.argument("title")
@click.argument("author")
@click.argument("category")
@click.option("--isbn", default="", help="ISBN of the edition.")
@click.option(
    "-n",
    "--copies",
    type=click.IntRange(min=1),
    default=1,
    help="Number of copies to add (default 1).",
)
@store_option
@seed_option
def add(
    title: str,
    author: str,
    category: str,
    isbn: str,
    copies: int,
    store_dir: Path | None,
    seed_location: str | None,
) -> None:
    """Add a book, or more copies of one already catalogued."""
    console = Console()
    if not title.strip() or not category.strip():
        console.print("[red]Title and category are required.[/red]")
        raise SystemExit(1)

    with open_database(store_dir, seed_location, console) as db:
        result = LibraryCatalog(db).add_book(title, author, isbn, category, copies)

    if result.merged:
        console.print(
            f"Merged into book {result.id}: [bold]{title}[/bold] now has {result.copies} copies."
        )
    else:
        console.print(f"Added [bold]{title}[/bold] as book {result.id}.")
