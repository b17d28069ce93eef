# ABOUTME: Unit tests for backup export and restore.
# ABOUTME: Validates file naming, collisions, restore replacement, and stale-schema reports.

from pathlib import Path

import pytest

from shelfkeeper.core.backup import DEFAULT_BACKUP_NAME, export_backup, restore_backup
from shelfkeeper.db.catalog import LibraryCatalog
from shelfkeeper.db.engine import Database, RestoreParseError
from tests.fixtures.databases import STALE_DDL, make_blob


class TestExportBackup:
    """Tests for export_backup()."""

    def test_writes_snapshot_to_file(self, db: Database, tmp_path: Path) -> None:
        path = export_backup(db, tmp_path / "copy.db")
        assert path == tmp_path / "copy.db"
        assert path.read_bytes() == db.export_snapshot()

    def test_directory_gets_default_name(self, db: Database, tmp_path: Path) -> None:
        path = export_backup(db, tmp_path)
        assert path == tmp_path / DEFAULT_BACKUP_NAME

    def test_existing_file_gets_suffix(self, db: Database, tmp_path: Path) -> None:
        (tmp_path / "copy.db").write_bytes(b"older backup")
        path = export_backup(db, tmp_path / "copy.db")
        assert path == tmp_path / "copy_1.db"
        assert (tmp_path / "copy.db").read_bytes() == b"older backup"

    def test_overwrite_replaces_file(self, db: Database, tmp_path: Path) -> None:
        (tmp_path / "copy.db").write_bytes(b"older backup")
        path = export_backup(db, tmp_path / "copy.db", overwrite=True)
        assert path == tmp_path / "copy.db"
        assert path.read_bytes() != b"older backup"

    def test_creates_parent_directories(self, db: Database, tmp_path: Path) -> None:
        path = export_backup(db, tmp_path / "a" / "b" / "copy.db")
        assert path.exists()


class TestRestoreBackup:
    """Tests for restore_backup()."""

    def test_replaces_live_database(
        self, catalog: LibraryCatalog, db: Database, tmp_path: Path
    ) -> None:
        catalog.add_category("Before")
        backup = export_backup(db, tmp_path / "b.db")
        catalog.add_category("After")

        result = restore_backup(db, backup)

        assert result.schema_current
        assert result.size == backup.stat().st_size
        assert [c.name for c in catalog.get_all_categories()] == ["Before"]

    def test_reports_missing_tables(self, db: Database, tmp_path: Path) -> None:
        source = tmp_path / "stale.db"
        source.write_bytes(make_blob(STALE_DDL))

        result = restore_backup(db, source)

        assert result.missing_tables == ["settings"]
        assert not result.schema_current

    def test_unreadable_file_raises(self, db: Database, tmp_path: Path) -> None:
        with pytest.raises(RestoreParseError):
            restore_backup(db, tmp_path / "nope.db")

    def test_not_a_database_raises(
        self, catalog: LibraryCatalog, db: Database, tmp_path: Path
    ) -> None:
        catalog.add_category("Keep")
        source = tmp_path / "notes.txt"
        source.write_text("shopping list" * 100)

        with pytest.raises(RestoreParseError):
            restore_backup(db, source)
        assert [c.name for c in catalog.get_all_categories()] == ["Keep"]
