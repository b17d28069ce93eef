# ABOUTME: SQL DDL statements for the Shelfkeeper library database schema.
# ABOUTME: Defines the catalogue tables, the required-table list, and demo seed rows.

# Tables a loaded database must contain before it is trusted.
REQUIRED_TABLES = ("books", "categories", "borrows", "settings")

SCHEMA_V1 = """
-- Physical titles held by the library; copies counts units on the shelf
CREATE TABLE books (
    id        INTEGER PRIMARY KEY AUTOINCREMENT,
    title     TEXT NOT NULL,
    author    TEXT NOT NULL DEFAULT '',
    isbn      TEXT NOT NULL DEFAULT '',
    category  TEXT NOT NULL,
    copies    INTEGER NOT NULL DEFAULT 1 CHECK (copies >= 0)
);

CREATE INDEX idx_books_title ON books(title);
CREATE INDEX idx_books_category ON books(category);

CREATE TABLE categories (
    id    INTEGER PRIMARY KEY AUTOINCREMENT,
    name  TEXT NOT NULL UNIQUE COLLATE NOCASE
);

-- Loan history. book_id is not a foreign key: closed loans outlive their book.
CREATE TABLE borrows (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    book_id      INTEGER NOT NULL,
    borrower     TEXT NOT NULL,
    date_out     TEXT NOT NULL,
    due_date     TEXT NOT NULL,
    return_date  TEXT
);

CREATE INDEX idx_borrows_book_id ON borrows(book_id);
CREATE INDEX idx_borrows_open ON borrows(due_date) WHERE return_date IS NULL;

CREATE TABLE settings (
    key    TEXT PRIMARY KEY,
    value  TEXT
);
"""

DEMO_DATA = """
INSERT INTO categories (name) VALUES ('Fiction'), ('Science'), ('History'), ('Reference');

INSERT INTO books (title, author, isbn, category, copies) VALUES
    ('Things Fall Apart', 'Chinua Achebe', '9780385474542', 'Fiction', 3),
    ('Half of a Yellow Sun', 'Chimamanda Ngozi Adichie', '9781400095209', 'Fiction', 2),
    ('A Brief History of Time', 'Stephen Hawking', '9780553380163', 'Science', 1),
    ('The Gene', 'Siddhartha Mukherjee', '9781476733524', 'Science', 2),
    ('Guns, Germs, and Steel', 'Jared Diamond', '9780393317558', 'History', 1),
    ('Oxford English Dictionary', 'Oxford University Press', '', 'Reference', 1);

INSERT INTO borrows (book_id, borrower, date_out, due_date) VALUES
    (1, 'Amaka Obi', date('now', '-10 days'), date('now', '-3 days')),
    (4, 'Tunde Bello', date('now', '-2 days'), date('now', '+12 days'));

UPDATE books SET copies = copies - 1 WHERE id IN (1, 4);
"""
