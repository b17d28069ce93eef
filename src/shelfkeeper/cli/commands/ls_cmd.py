# ABOUTME: The `shelfkeeper ls` command for listing catalogued books.
# ABOUTME: Displays a Rich table of books, optionally filtered by a search term.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shelfkeeper.cli.options import open_database, seed_option, store_option
from shelfkeeper.db.catalog import LibraryCatalog


@click.command("ls")
@store_option
@seed_option
@click.option(
    "-s",
    "--search",
    "search_term",
    default=None,
    help="Filter by title, author, ISBN, or category.",
)
def ls(store_dir: Path | None, seed_location: str | None, search_term: str | None) -> None:
    """List all books in the library catalogue."""
    console = Console()
    with open_database(store_dir, seed_location, console) as db:
        catalog = LibraryCatalog(db)
        books = catalog.search_books(search_term) if search_term else catalog.get_all_books()

    if not books:
        console.print("[yellow]No books in the library.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("ISBN")
    table.add_column("Category", style="cyan")
    table.add_column("Copies", justify="right")

    for book in books:
        copies = str(book.copies) if book.copies else "[red]0[/red]"
        table.add_row(
            str(book.id),
            book.title,
            book.author or "[dim]unknown[/dim]",
            book.isbn,
            book.category,
            copies,
        )

    console.print(table)
    console.print(f"\n[dim]{len(books)} title(s)[/dim]")
