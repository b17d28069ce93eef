# ABOUTME: Loan commands: `borrow`, `return`, and `loans`.
# ABOUTME: Records loans and returns, and lists open or historical loans.

from datetime import date, datetime, timedelta
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shelfkeeper.cli.options import open_database, seed_option, store_option
from shelfkeeper.db.catalog import LibraryCatalog

DEFAULT_LOAN_DAYS = 14

_date_type = click.DateTime(formats=["%Y-%m-%d"])


def _iso(value: datetime | None, fallback: date) -> str:
    return (value.date() if value else fallback).isoformat()


@click.command("borrow")
@click.argument("book_id", type=int)
@click.argument("borrower")
@click.option(
    "--out", "date_out", type=_date_type, default=None, help="Loan date (default today)."
)
@click.option(
    "--due",
    "due_date",
    type=_date_type,
    default=None,
    help=f"Due date (default {DEFAULT_LOAN_DAYS} days after the loan date).",
)
@store_option
@seed_option
def borrow(
    book_id: int,
    borrower: str,
    date_out: datetime | None,
    due_date: datetime | None,
    store_dir: Path | None,
    seed_location: str | None,
) -> None:
    """Lend a copy of a book to a borrower."""
    console = Console()
    out = date_out.date() if date_out else date.today()
    due = _iso(due_date, out + timedelta(days=DEFAULT_LOAN_DAYS))

    with open_database(store_dir, seed_location, console) as db:
        loan_id = LibraryCatalog(db).record_borrow(book_id, borrower, out.isoformat(), due)

    console.print(f"Loan {loan_id}: book {book_id} to [bold]{borrower}[/bold], due {due}.")


@click.command("return")
@click.argument("loan_id", type=int)
@click.option(
    "--on", "returned_on", type=_date_type, default=None, help="Return date (default today)."
)
@store_option
@seed_option
def return_book(
    loan_id: int,
    returned_on: datetime | None,
    store_dir: Path | None,
    seed_location: str | None,
) -> None:
    """Record that a borrowed copy came back."""
    console = Console()
    return_date = _iso(returned_on, date.today())

    with open_database(store_dir, seed_location, console) as db:
        catalog = LibraryCatalog(db)
        loan = catalog.get_loan(loan_id)
        if loan is None:
            console.print(f"[red]Loan {loan_id} not found.[/red]")
            raise SystemExit(1)
        catalog.record_return(loan_id, loan.book_id, return_date)

    console.print(f"Returned [bold]{loan.book_title}[/bold] from {loan.borrower} on {return_date}.")


@click.command("loans")
@click.option("--all", "show_all", is_flag=True, default=False, help="Include returned loans.")
@click.option("--borrower", default=None, help="Only open loans held by this borrower.")
@click.option("-s", "--search", "search_term", default="", help="Filter history (with --all).")
@store_option
@seed_option
def loans(
    show_all: bool,
    borrower: str | None,
    search_term: str,
    store_dir: Path | None,
    seed_location: str | None,
) -> None:
    """List open loans, or the full history with --all."""
    console = Console()
    with open_database(store_dir, seed_location, console) as db:
        catalog = LibraryCatalog(db)
        if show_all:
            records = catalog.get_all_loans(search_term)
        elif borrower:
            records = catalog.get_active_loans_by_borrower(borrower)
        else:
            records = catalog.get_active_loans()

    if not records:
        console.print("[yellow]No loans to show.[/yellow]")
        return

    on = date.today().isoformat()
    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Book", style="bold")
    table.add_column("Borrower")
    table.add_column("Out")
    table.add_column("Due")
    table.add_column("Returned")

    for loan in records:
        due = f"[red]{loan.due_date}[/red]" if loan.is_overdue(on) else loan.due_date
        table.add_row(
            str(loan.id),
            loan.book_title or "[dim]deleted[/dim]",
            loan.borrower,
            loan.date_out,
            due,
            loan.return_date or "",
        )

    console.print(table)
    console.print(f"\n[dim]{len(records)} loan(s)[/dim]")
