# ABOUTME: Helpers that build serialized SQLite images for engine and backup tests.
# ABOUTME: Includes stale-schema images and WAL-flagged headers.

import sqlite3

STALE_DDL = """
CREATE TABLE books (id INTEGER PRIMARY KEY, title TEXT, author TEXT, isbn TEXT,
                    category TEXT, copies INTEGER);
CREATE TABLE categories (id INTEGER PRIMARY KEY, name TEXT);
CREATE TABLE borrows (id INTEGER PRIMARY KEY, book_id INTEGER, borrower TEXT,
                      date_out TEXT, due_date TEXT, return_date TEXT);
INSERT INTO books (title, author, isbn, category, copies) VALUES ('Old', 'Anon', '', 'Misc', 1);
"""


def make_blob(ddl: str) -> bytes:
    """Serialize a throwaway database built from the given DDL."""
    conn = sqlite3.connect(":memory:")
    conn.executescript(ddl)
    blob = conn.serialize()
    conn.close()
    return blob


def with_wal_header(blob: bytes) -> bytes:
    """Mark a database image as WAL mode, as a file copied off disk may be."""
    return blob[:18] + b"\x02\x02" + blob[20:]
