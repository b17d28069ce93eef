# ABOUTME: Catalogue and loan operations for the Shelfkeeper library database.
# ABOUTME: Books, categories, borrows, settings and stats, with the domain guards the engine lacks.

from datetime import date, timedelta

from shelfkeeper.db.engine import Database, TxExecute
from shelfkeeper.db.engine import today as engine_today
from shelfkeeper.db.mapping import (
    AddBookResult,
    Book,
    Category,
    LibraryStats,
    Loan,
    row_to_book,
    row_to_category,
    row_to_loan,
)

DEMO_CLEARED_KEY = "demo_cleared"

_LOAN_COLUMNS = (
    "b.id, b.book_id, b.borrower, b.date_out, b.due_date, b.return_date, "
    "bk.title AS book_title"
)


class CatalogError(Exception):
    """Base class for domain rule violations."""


class NotFoundError(CatalogError):
    """Raised when a referenced book, category, or loan does not exist."""


class AlreadyReturnedError(NotFoundError):
    """Raised when closing a loan that has no open record left to close."""


class DuplicateNameError(CatalogError):
    """Raised when a category name collides with an existing one."""


class NoCopiesAvailableError(CatalogError):
    """Raised when borrowing a book whose copy count is zero."""


class HasActiveLoansError(CatalogError):
    """Raised when deleting a book that still has open loans."""


class CategoryInUseError(CatalogError):
    """Raised when deleting a category that books still reference."""


class LibraryCatalog:
    """Domain operations over a Database; the engine itself knows nothing of books."""

    def __init__(self, db: Database) -> None:
        self._db = db

    # --- Books ---

    def get_all_books(self) -> list[Book]:
        """Return every book, ordered by title."""
        rows = self._db.query("SELECT * FROM books ORDER BY title ASC")
        return [row_to_book(row) for row in rows]

    def get_book(self, book_id: int) -> Book | None:
        rows = self._db.query("SELECT * FROM books WHERE id = ?", (book_id,))
        return row_to_book(rows[0]) if rows else None

    def search_books(self, term: str) -> list[Book]:
        """Substring match on title, author, isbn, and category."""
        pattern = f"%{term}%"
        rows = self._db.query(
            "SELECT * FROM books "
            "WHERE title LIKE ? OR author LIKE ? OR isbn LIKE ? OR category LIKE ? "
            "ORDER BY title ASC",
            (pattern, pattern, pattern, pattern),
        )
        return [row_to_book(row) for row in rows]

    def add_book(
        self,
        title: str,
        author: str,
        isbn: str | None,
        category: str,
        copies: int = 1,
    ) -> AddBookResult:
        """Add a book, or merge copies into an existing title+isbn match.

        Title and isbn are compared case-insensitively with surrounding
        whitespace ignored; a blank isbn only matches another blank isbn.
        Case folding is SQLite LOWER(), which folds ASCII letters only, so
        "Émile" and "émile" are different titles.
        The caller is responsible for copies >= 1 and non-empty title and
        category.

        Returns:
            An AddBookResult; merged is True when copies were added to an
            existing row, and copies is that row's new total.
        """
        isbn = (isbn or "").strip()
        existing = self._db.query(
            "SELECT id, copies FROM books "
            "WHERE LOWER(TRIM(title)) = LOWER(TRIM(?)) "
            "AND LOWER(TRIM(COALESCE(isbn, ''))) = LOWER(?)",
            (title, isbn),
        )
        if existing:
            row = existing[0]
            self._db.execute(
                "UPDATE books SET copies = copies + ? WHERE id = ?",
                (copies, row["id"]),
            )
            return AddBookResult(id=row["id"], merged=True, copies=row["copies"] + copies)

        result = self._db.execute(
            "INSERT INTO books (title, author, isbn, category, copies) VALUES (?, ?, ?, ?, ?)",
            (title, author, isbn, category, copies),
        )
        book_id: int = result.inserted_id  # type: ignore[assignment]
        return AddBookResult(id=book_id, merged=False, copies=copies)

    def update_book(self, book_id: int, *, title: str, author: str, category: str) -> int:
        """Overwrite title, author and category; copies are never touched.

        Returns:
            The number of rows changed; 0 means the book does not exist.
        """
        result = self._db.execute(
            "UPDATE books SET title = ?, author = ?, category = ? WHERE id = ?",
            (title, author, category, book_id),
        )
        return result.rows_affected

    def delete_book(self, book_id: int) -> None:
        """Delete a book. Closed loans that reference it are kept as history.

        Raises:
            HasActiveLoansError: If any open loan references the book.
        """
        if self._has_open_loans(book_id):
            raise HasActiveLoansError(
                f"Book {book_id} has active loans; return all copies first"
            )
        self._db.execute("DELETE FROM books WHERE id = ?", (book_id,))

    def _has_open_loans(self, book_id: int) -> bool:
        rows = self._db.query(
            "SELECT id FROM borrows WHERE book_id = ? AND return_date IS NULL LIMIT 1",
            (book_id,),
        )
        return bool(rows)

    # --- Categories ---

    def get_all_categories(self) -> list[Category]:
        rows = self._db.query("SELECT * FROM categories ORDER BY name ASC")
        return [row_to_category(row) for row in rows]

    def get_category(self, category_id: int) -> Category | None:
        rows = self._db.query("SELECT * FROM categories WHERE id = ?", (category_id,))
        return row_to_category(rows[0]) if rows else None

    def add_category(self, name: str) -> int:
        """Create a category and return its id.

        Raises:
            DuplicateNameError: If the normalized name already exists.
        """
        if self._name_taken(name):
            raise DuplicateNameError(f"Category '{name.strip()}' already exists")
        result = self._db.execute("INSERT INTO categories (name) VALUES (?)", (name,))
        return result.inserted_id  # type: ignore[return-value]

    def update_category(self, category_id: int, new_name: str) -> None:
        """Rename a category and every book filed under its old name.

        Both updates run in one transaction, so book linkage survives the
        rename or nothing changes.

        Raises:
            DuplicateNameError: If another category already has the name.
            NotFoundError: If the category does not exist.
        """
        if self._name_taken(new_name, exclude_id=category_id):
            raise DuplicateNameError(f"Category '{new_name.strip()}' already exists")

        old = self.get_category(category_id)
        if old is None:
            raise NotFoundError(f"Category {category_id} not found")

        def rename(tx: TxExecute) -> None:
            tx("UPDATE categories SET name = ? WHERE id = ?", (new_name, category_id))
            tx(
                "UPDATE books SET category = ? "
                "WHERE LOWER(TRIM(category)) = LOWER(TRIM(?))",
                (new_name, old.name),
            )

        self._db.run_transaction(rename)

    def delete_category(self, category_id: int) -> None:
        """Delete a category no book refers to.

        Raises:
            NotFoundError: If the category does not exist.
            CategoryInUseError: If any book's category matches its name.
        """
        category = self.get_category(category_id)
        if category is None:
            raise NotFoundError(f"Category {category_id} not found")

        used = self._db.query(
            "SELECT id FROM books WHERE LOWER(TRIM(category)) = LOWER(TRIM(?)) LIMIT 1",
            (category.name,),
        )
        if used:
            raise CategoryInUseError(f"Category '{category.name}' is used by one or more books")
        self._db.execute("DELETE FROM categories WHERE id = ?", (category_id,))

    def _name_taken(self, name: str, *, exclude_id: int | None = None) -> bool:
        """Trimmed, case-insensitive name match; LOWER() folds ASCII letters only."""
        sql = "SELECT id FROM categories WHERE LOWER(TRIM(name)) = LOWER(TRIM(?))"
        params: tuple = (name,)
        if exclude_id is not None:
            sql += " AND id != ?"
            params = (name, exclude_id)
        return bool(self._db.query(sql, params))

    # --- Borrows ---

    def record_borrow(self, book_id: int, borrower: str, date_out: str, due_date: str) -> int:
        """Open a loan and take one copy off the shelf, atomically.

        Returns:
            The id of the new loan.

        Raises:
            NotFoundError: If the book does not exist.
            NoCopiesAvailableError: If the book has no copies left.
        """
        book = self.get_book(book_id)
        if book is None:
            raise NotFoundError(f"Book {book_id} not found")
        if book.copies < 1:
            raise NoCopiesAvailableError(f"No copies of '{book.title}' available")

        def borrow(tx: TxExecute) -> int:
            result = tx(
                "INSERT INTO borrows (book_id, borrower, date_out, due_date) VALUES (?, ?, ?, ?)",
                (book_id, borrower, date_out, due_date),
            )
            tx("UPDATE books SET copies = copies - 1 WHERE id = ?", (book_id,))
            return result.inserted_id  # type: ignore[return-value]

        return self._db.run_transaction(borrow)

    def record_return(self, borrow_id: int, book_id: int, return_date: str) -> None:
        """Close an open loan and put its copy back on the shelf, atomically.

        Raises:
            NotFoundError: If the loan does not exist or is for another book.
            AlreadyReturnedError: If the loan was already closed.
        """
        loan = self.get_loan(borrow_id)
        if loan is None or loan.book_id != book_id:
            raise NotFoundError(f"Loan {borrow_id} for book {book_id} not found")
        if not loan.is_open:
            raise AlreadyReturnedError(
                f"Loan {borrow_id} was already returned on {loan.return_date}"
            )

        def give_back(tx: TxExecute) -> None:
            closed = tx(
                "UPDATE borrows SET return_date = ? WHERE id = ? AND return_date IS NULL",
                (return_date, borrow_id),
            )
            if closed.rows_affected == 0:
                raise AlreadyReturnedError(f"Loan {borrow_id} is no longer open")
            tx("UPDATE books SET copies = copies + 1 WHERE id = ?", (book_id,))

        self._db.run_transaction(give_back)

    def get_loan(self, borrow_id: int) -> Loan | None:
        rows = self._db.query(
            f"SELECT {_LOAN_COLUMNS} FROM borrows b "
            "LEFT JOIN books bk ON bk.id = b.book_id WHERE b.id = ?",
            (borrow_id,),
        )
        return row_to_loan(rows[0]) if rows else None

    def get_active_loans(self) -> list[Loan]:
        """Open loans, soonest due first."""
        rows = self._db.query(
            f"SELECT {_LOAN_COLUMNS} FROM borrows b "
            "JOIN books bk ON bk.id = b.book_id "
            "WHERE b.return_date IS NULL "
            "ORDER BY b.due_date ASC"
        )
        return [row_to_loan(row) for row in rows]

    def get_active_loans_by_borrower(self, borrower: str) -> list[Loan]:
        rows = self._db.query(
            f"SELECT {_LOAN_COLUMNS} FROM borrows b "
            "JOIN books bk ON bk.id = b.book_id "
            "WHERE b.return_date IS NULL AND b.borrower = ? "
            "ORDER BY b.due_date ASC",
            (borrower,),
        )
        return [row_to_loan(row) for row in rows]

    def get_unique_borrowers(self) -> list[str]:
        """Distinct names of borrowers who currently hold a book."""
        rows = self._db.query(
            "SELECT DISTINCT borrower FROM borrows "
            "WHERE return_date IS NULL ORDER BY borrower ASC"
        )
        return [row["borrower"] for row in rows]

    def get_all_loans(self, search: str = "") -> list[Loan]:
        """Full loan history, newest first, filtered by borrower, title, or isbn."""
        pattern = f"%{search}%"
        rows = self._db.query(
            f"SELECT {_LOAN_COLUMNS} FROM borrows b "
            "LEFT JOIN books bk ON bk.id = b.book_id "
            "WHERE b.borrower LIKE ? OR bk.title LIKE ? OR bk.isbn LIKE ? "
            "ORDER BY b.date_out DESC, b.id DESC",
            (pattern, pattern, pattern),
        )
        return [row_to_loan(row) for row in rows]

    def count_due_soon(self, days: int = 3, today: date | None = None) -> int:
        """Count open loans due after today and within the next ``days`` days."""
        start = today or date.today()
        end = start + timedelta(days=days)
        rows = self._db.query(
            "SELECT COUNT(*) AS n FROM borrows "
            "WHERE return_date IS NULL AND due_date > ? AND due_date <= ?",
            (start.isoformat(), end.isoformat()),
        )
        return rows[0]["n"]

    # --- Stats ---

    def get_stats(self, today: date | None = None) -> LibraryStats:
        """Compute dashboard counts fresh from the database.

        Args:
            today: Date used for overdue and due-today checks. Defaults to
                the current local date.
        """
        on = today.isoformat() if today else engine_today()

        def count(sql: str, params: tuple = ()) -> int:
            return self._db.query(sql, params)[0]["n"] or 0

        return LibraryStats(
            total_titles=count("SELECT COUNT(*) AS n FROM books"),
            total_copies=count("SELECT COALESCE(SUM(copies), 0) AS n FROM books"),
            active_loans=count("SELECT COUNT(*) AS n FROM borrows WHERE return_date IS NULL"),
            returned_loans=count(
                "SELECT COUNT(*) AS n FROM borrows WHERE return_date IS NOT NULL"
            ),
            overdue_count=count(
                "SELECT COUNT(*) AS n FROM borrows WHERE return_date IS NULL AND due_date < ?",
                (on,),
            ),
            top_books=self._db.query(
                "SELECT bk.title, bk.author, COUNT(b.id) AS borrow_count "
                "FROM borrows b JOIN books bk ON bk.id = b.book_id "
                "GROUP BY b.book_id "
                "ORDER BY borrow_count DESC, bk.title ASC "
                "LIMIT 5"
            ),
            due_today=self._db.query(
                "SELECT b.borrower, bk.title FROM borrows b "
                "JOIN books bk ON bk.id = b.book_id "
                "WHERE b.return_date IS NULL AND b.due_date = ?",
                (on,),
            ),
        )

    # --- Settings ---

    def get_setting(self, key: str) -> str | None:
        rows = self._db.query("SELECT value FROM settings WHERE key = ?", (key,))
        return rows[0]["value"] if rows else None

    def save_setting(self, key: str, value: str) -> None:
        """Insert or overwrite a setting."""
        self._db.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )

    def is_demo_cleared(self) -> bool:
        return self.get_setting(DEMO_CLEARED_KEY) == "1"

    def reset_to_fresh(self) -> None:
        """Wipe every loan, book, category and setting, then flag the wipe.

        Irreversible and all-or-nothing.
        """

        def wipe(tx: TxExecute) -> None:
            tx("DELETE FROM borrows")
            tx("DELETE FROM books")
            tx("DELETE FROM categories")
            tx("DELETE FROM settings")
            tx(
                "INSERT INTO settings (key, value) VALUES (?, ?)",
                (DEMO_CLEARED_KEY, "1"),
            )

        self._db.run_transaction(wipe)
