# ABOUTME: Public API for the Shelfkeeper library database layer.
# ABOUTME: Exports the engine, storage and seed sources, catalog operations, and data types.

from shelfkeeper.db.catalog import (
    AlreadyReturnedError,
    CatalogError,
    CategoryInUseError,
    DuplicateNameError,
    HasActiveLoansError,
    LibraryCatalog,
    NoCopiesAvailableError,
    NotFoundError,
)
from shelfkeeper.db.engine import (
    Database,
    DatabaseError,
    ExecResult,
    InitializationError,
    NotInitializedError,
    RestoreParseError,
)
from shelfkeeper.db.mapping import AddBookResult, Book, Category, LibraryStats, Loan
from shelfkeeper.db.seed import BundledSeed, FileSeed, HttpSeed, SeedFetchError
from shelfkeeper.db.storage import DEFAULT_STORE_DIR, STORAGE_KEY, FileStorage, MemoryStorage

__all__ = [
    "DEFAULT_STORE_DIR",
    "STORAGE_KEY",
    "AddBookResult",
    "AlreadyReturnedError",
    "Book",
    "BundledSeed",
    "CatalogError",
    "Category",
    "CategoryInUseError",
    "Database",
    "DatabaseError",
    "DuplicateNameError",
    "ExecResult",
    "FileSeed",
    "FileStorage",
    "HasActiveLoansError",
    "HttpSeed",
    "InitializationError",
    "LibraryCatalog",
    "LibraryStats",
    "Loan",
    "MemoryStorage",
    "NoCopiesAvailableError",
    "NotFoundError",
    "NotInitializedError",
    "RestoreParseError",
    "SeedFetchError",
]
