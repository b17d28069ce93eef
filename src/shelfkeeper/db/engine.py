# ABOUTME: Embedded SQLite engine that lives in memory and persists as a single blob.
# ABOUTME: Loads from storage or a seed, runs statements/transactions, re-persists on commit.

import logging
import sqlite3
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any, TypeVar

from shelfkeeper.db.schema import REQUIRED_TABLES
from shelfkeeper.db.seed import BundledSeed, SeedFetchError, SeedSource
from shelfkeeper.db.storage import STORAGE_KEY, StorageAdapter

logger = logging.getLogger(__name__)

T = TypeVar("T")

Params = Sequence[Any] | dict[str, Any]


class DatabaseError(Exception):
    """Base class for engine-level failures."""


class NotInitializedError(DatabaseError):
    """Raised when the engine is used before initialize() has succeeded."""


class InitializationError(DatabaseError):
    """Raised when no usable database could be loaded or seeded."""


class RestoreParseError(DatabaseError):
    """Raised when a backup blob is not a readable SQLite database."""


@dataclass(frozen=True)
class ExecResult:
    """Outcome of a single mutating statement."""

    rows_affected: int
    inserted_id: int | None


TxExecute = Callable[..., ExecResult]


def today() -> str:
    """Current local date as an ISO ``YYYY-MM-DD`` string."""
    return date.today().isoformat()


def _clear_wal_flag(blob: bytes) -> bytes:
    """Rewrite a WAL-mode file header to rollback mode.

    An in-memory database cannot open a WAL-mode image, which is what a
    backup copied straight off disk may be.
    """
    if len(blob) >= 20 and blob[18] == 2 and blob[19] == 2:
        return blob[:18] + b"\x01\x01" + blob[20:]
    return blob


def _open_blob(blob: bytes) -> sqlite3.Connection:
    """Parse a serialized database into a fresh in-memory connection.

    The candidate is fully probed before it is returned, so callers can
    adopt it or discard it without touching the live instance.

    Raises:
        sqlite3.DatabaseError: If the blob is not a readable database.
    """
    if not blob:
        raise sqlite3.DatabaseError("empty database image")
    conn = sqlite3.connect(":memory:", isolation_level=None)
    try:
        conn.deserialize(_clear_wal_flag(bytes(blob)))
        conn.execute("SELECT name FROM sqlite_master").fetchall()
    except sqlite3.Error:
        conn.close()
        raise
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def existing_tables(conn: sqlite3.Connection) -> set[str]:
    """Return the names of all tables in the database."""
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    return {row[0] for row in cursor.fetchall()}


def is_schema_current(conn: sqlite3.Connection) -> bool:
    """Check that every required table is present."""
    return set(REQUIRED_TABLES) <= existing_tables(conn)


class Database:
    """Owns one live in-memory SQLite instance and its persisted copy.

    Every committed mutation is followed by serializing the whole database
    and writing it to the storage adapter under a single key.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        seed: SeedSource | None = None,
        *,
        key: str = STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._seed = seed or BundledSeed()
        self._key = key
        self._conn: sqlite3.Connection | None = None
        self._dirty = False
        self._persisted: bytes | None = None

    @property
    def is_initialized(self) -> bool:
        return self._conn is not None

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def initialize(self) -> sqlite3.Connection:
        """Load the persisted database, reseeding when absent or stale.

        Idempotent: once a live instance exists it is returned unchanged.

        Returns:
            The live sqlite3.Connection.

        Raises:
            InitializationError: If the seed is needed but cannot be loaded.
        """
        if self._conn is not None:
            return self._conn

        if not hasattr(sqlite3.Connection, "serialize"):
            raise InitializationError(
                f"SQLite {sqlite3.sqlite_version} lacks serialize/deserialize support"
            )

        saved = self._storage.get(self._key)
        if saved is not None:
            try:
                candidate = _open_blob(saved)
            except sqlite3.DatabaseError as exc:
                logger.warning("Stored database unreadable (%s), reloading seed", exc)
            else:
                if is_schema_current(candidate):
                    self._conn = candidate
                    self._persisted = candidate.serialize()
                    logger.info("Loaded from storage, schema current")
                    return self._conn
                candidate.close()
                logger.warning("Schema outdated, reloading seed")
        else:
            logger.info("First run, loading seed database")

        self._conn = self._load_seed()
        self._dirty = True
        self.persist()
        logger.info("Seed database loaded and persisted")
        return self._conn

    def _load_seed(self) -> sqlite3.Connection:
        try:
            blob = self._seed.fetch()
        except SeedFetchError as exc:
            raise InitializationError(str(exc)) from exc
        try:
            return _open_blob(blob)
        except sqlite3.DatabaseError as exc:
            raise InitializationError(f"Seed DB is not a valid database: {exc}") from exc

    def _require(self) -> sqlite3.Connection:
        if self._conn is None:
            raise NotInitializedError("Database not initialised")
        return self._conn

    def query(self, sql: str, params: Params = ()) -> list[dict[str, Any]]:
        """Run a read statement and return each row as a column→value dict."""
        conn = self._require()
        cursor = conn.execute(sql, params)
        return [dict(row) for row in cursor.fetchall()]

    def execute(self, sql: str, params: Params = ()) -> ExecResult:
        """Run one mutating statement, then persist the database."""
        conn = self._require()
        cursor = conn.execute(sql, params)
        self._dirty = True
        result = ExecResult(rows_affected=cursor.rowcount, inserted_id=cursor.lastrowid or None)
        self.persist()
        return result

    def run_transaction(self, body: Callable[[TxExecute], T]) -> T:
        """Run ``body`` inside BEGIN/COMMIT and persist once afterwards.

        ``body`` receives an execute function with the same signature as
        execute() that does not persist per statement. Any exception raised
        by ``body`` rolls the transaction back and is re-raised; nothing is
        persisted in that case.

        Returns:
            Whatever ``body`` returns.
        """
        conn = self._require()

        def tx_execute(sql: str, params: Params = ()) -> ExecResult:
            cursor = conn.execute(sql, params)
            return ExecResult(rows_affected=cursor.rowcount, inserted_id=cursor.lastrowid or None)

        conn.execute("BEGIN")
        try:
            result = body(tx_execute)
            conn.execute("COMMIT")
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise

        self._dirty = True
        self.persist()
        return result

    def persist(self) -> None:
        """Serialize the live database to storage if it changed.

        Deferred while a transaction is open; the commit persists instead.
        If the storage write fails, the live instance is rolled back to the
        last persisted image before the error propagates.
        """
        if self._conn is None or not self._dirty or self._conn.in_transaction:
            return
        blob = self._conn.serialize()
        try:
            self._storage.put(self._key, blob)
        except BaseException:
            self._revert_to_persisted()
            raise
        self._persisted = blob
        self._dirty = False
        logger.debug("Persisted database under key %r", self._key)

    def _revert_to_persisted(self) -> None:
        assert self._conn is not None
        self._dirty = False
        if self._persisted is None:
            # Nothing was ever stored; drop the unsaved instance entirely.
            self._conn.close()
            self._conn = None
            logger.warning("Storage write failed before first persist, instance discarded")
            return
        self._conn.deserialize(self._persisted)
        logger.warning("Storage write failed, reverted to last persisted state")

    def export_snapshot(self) -> bytes:
        """Serialize the live database without touching storage."""
        return self._require().serialize()

    def restore_from_snapshot(self, blob: bytes) -> None:
        """Replace the live database with ``blob`` and persist it.

        The blob is parsed before the current instance is released, so a
        malformed backup leaves the live database untouched. It is also
        written to storage before the swap, so a failed write leaves both
        the live instance and the stored copy as they were. No schema check
        is made here; a stale restore is caught by the next initialize().

        Raises:
            RestoreParseError: If the blob is not a readable database.
        """
        try:
            candidate = _open_blob(blob)
        except sqlite3.DatabaseError as exc:
            raise RestoreParseError(f"Backup file is not a valid database: {exc}") from exc

        image = candidate.serialize()
        try:
            self._storage.put(self._key, image)
        except BaseException:
            candidate.close()
            raise

        if self._conn is not None:
            self._conn.close()
        self._conn = candidate
        self._persisted = image
        self._dirty = False
        logger.info("Restored database from snapshot")

    def close(self) -> None:
        """Persist any pending change and release the live instance."""
        if self._conn is None:
            return
        self.persist()
        self._conn.close()
        self._conn = None
