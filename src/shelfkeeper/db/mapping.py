# ABOUTME: Typed records for catalogue rows and the converters that build them.
# ABOUTME: Keeps sqlite row dictionaries out of the public repository API.

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Book:
    """A catalogued title and its available copy count."""

    id: int
    title: str
    author: str
    isbn: str
    category: str
    copies: int


@dataclass
class Category:
    id: int
    name: str


@dataclass
class Loan:
    """A borrow record joined with the title of the borrowed book.

    book_title is None when the book has since been deleted.
    """

    id: int
    book_id: int
    borrower: str
    date_out: str
    due_date: str
    return_date: str | None = None
    book_title: str | None = None

    @property
    def is_open(self) -> bool:
        return self.return_date is None

    def is_overdue(self, on: str) -> bool:
        """Whether the loan is still open and was due before ``on``."""
        return self.is_open and self.due_date < on


@dataclass
class AddBookResult:
    """Outcome of add_book: a new row, or copies merged into an existing one."""

    id: int
    merged: bool
    copies: int


@dataclass
class LibraryStats:
    """Summary counts for the dashboard."""

    total_titles: int = 0
    total_copies: int = 0
    active_loans: int = 0
    returned_loans: int = 0
    overdue_count: int = 0
    top_books: list[dict[str, Any]] = field(default_factory=list)
    due_today: list[dict[str, Any]] = field(default_factory=list)


def row_to_book(row: dict[str, Any]) -> Book:
    return Book(
        id=row["id"],
        title=row["title"],
        author=row["author"] or "",
        isbn=row["isbn"] or "",
        category=row["category"],
        copies=row["copies"],
    )


def row_to_category(row: dict[str, Any]) -> Category:
    return Category(id=row["id"], name=row["name"])


def row_to_loan(row: dict[str, Any]) -> Loan:
    """Convert a borrows row, optionally joined with book_title, to a Loan."""
    return Loan(
        id=row["id"],
        book_id=row["book_id"],
        borrower=row["borrower"],
        date_out=row["date_out"],
        due_date=row["due_date"],
        return_date=row.get("return_date"),
        book_title=row.get("book_title"),
    )
