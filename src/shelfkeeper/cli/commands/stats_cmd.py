# ABOUTME: The `shelfkeeper stats` command for the library summary.
# ABOUTME: Shows title/copy/loan counts, overdue loans, top books, and today's due list.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shelfkeeper.cli.options import open_database, seed_option, store_option
from shelfkeeper.db.catalog import LibraryCatalog


@click.command("stats")
@store_option
@seed_option
def stats(store_dir: Path | None, seed_location: str | None) -> None:
    """Show library summary counts."""
    console = Console()
    with open_database(store_dir, seed_location, console) as db:
        catalog = LibraryCatalog(db)
        summary = catalog.get_stats()
        due_soon = catalog.count_due_soon()

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=16)
    table.add_column("Value", justify="right")
    table.add_row("Titles", str(summary.total_titles))
    table.add_row("Copies on shelf", str(summary.total_copies))
    table.add_row("Active loans", str(summary.active_loans))
    table.add_row("Returned loans", str(summary.returned_loans))
    overdue = str(summary.overdue_count)
    table.add_row("Overdue", f"[red]{overdue}[/red]" if summary.overdue_count else overdue)
    table.add_row("Due in 3 days", str(due_soon))
    console.print(table)

    if summary.top_books:
        console.print("\n[bold]Most borrowed[/bold]")
        for row in summary.top_books:
            console.print(f"  {row['title']} [dim]({row['borrow_count']})[/dim]")

    if summary.due_today:
        console.print("\n[bold]Due today[/bold]")
        for row in summary.due_today:
            console.print(f"  {row['title']} [dim]- {row['borrower']}[/dim]")
