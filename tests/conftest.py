# ABOUTME: Shared pytest fixtures for Shelfkeeper tests.
# ABOUTME: Provides in-memory storage, seeds, an initialized database, and a catalog.

from pathlib import Path

import pytest

from shelfkeeper.db.catalog import LibraryCatalog
from shelfkeeper.db.engine import Database
from shelfkeeper.db.seed import BundledSeed
from shelfkeeper.db.storage import MemoryStorage

DUNE_SQL = (
    "INSERT INTO books (title, author, isbn, category, copies) "
    "VALUES ('Dune', 'Frank Herbert', '123', 'Fiction', 2);"
    "INSERT INTO categories (name) VALUES ('Fiction');"
)


@pytest.fixture
def storage() -> MemoryStorage:
    """Empty in-memory storage adapter."""
    return MemoryStorage()


@pytest.fixture
def empty_seed() -> BundledSeed:
    """Seed with the schema and no rows."""
    return BundledSeed(with_demo=False)


@pytest.fixture
def dune_seed() -> BundledSeed:
    """Seed holding one book: Dune, isbn 123, two copies."""
    return BundledSeed(with_demo=False, extra_sql=DUNE_SQL)


@pytest.fixture
def db(storage: MemoryStorage, empty_seed: BundledSeed) -> Database:
    """An initialized database over empty storage and an empty seed."""
    database = Database(storage, empty_seed)
    database.initialize()
    return database


@pytest.fixture
def catalog(db: Database) -> LibraryCatalog:
    """A LibraryCatalog over the empty database."""
    return LibraryCatalog(db)


@pytest.fixture
def dune_catalog(storage: MemoryStorage, dune_seed: BundledSeed) -> LibraryCatalog:
    """A LibraryCatalog seeded with Dune."""
    database = Database(storage, dune_seed)
    database.initialize()
    return LibraryCatalog(database)


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    """Directory for a FileStorage-backed library."""
    return tmp_path / "store"
