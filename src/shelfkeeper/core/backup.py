# ABOUTME: Backup export and destructive restore for the library database.
# ABOUTME: Writes snapshots to a downloadable .db file and replaces the live database from one.

from dataclasses import dataclass
from pathlib import Path

from shelfkeeper.db.engine import Database, RestoreParseError, existing_tables
from shelfkeeper.db.schema import REQUIRED_TABLES

DEFAULT_BACKUP_NAME = "shelfkeeper-backup.db"

_MAX_COLLISION_ATTEMPTS = 10_000


@dataclass
class RestoreResult:
    """What a restore replaced the live database with."""

    source: Path
    size: int
    missing_tables: list[str]

    @property
    def schema_current(self) -> bool:
        return not self.missing_tables


def _resolve_collision(path: Path) -> Path:
    """Find a non-colliding filename by appending _1, _2, etc."""
    if not path.exists():
        return path
    for counter in range(1, _MAX_COLLISION_ATTEMPTS + 1):
        candidate = path.parent / f"{path.stem}_{counter}{path.suffix}"
        if not candidate.exists():
            return candidate
    raise OSError(
        f"Could not find a non-colliding filename after "
        f"{_MAX_COLLISION_ATTEMPTS} attempts: {path}"
    )


def export_backup(db: Database, dest: Path | None = None, *, overwrite: bool = False) -> Path:
    """Write a snapshot of the live database to a backup file.

    Args:
        db: An initialized database.
        dest: Target file, or a directory to place DEFAULT_BACKUP_NAME in.
            Defaults to DEFAULT_BACKUP_NAME in the working directory.
        overwrite: Replace an existing file instead of picking a new name.

    Returns:
        The path the backup was written to.
    """
    target = dest or Path(DEFAULT_BACKUP_NAME)
    if target.is_dir():
        target = target / DEFAULT_BACKUP_NAME
    if not overwrite:
        target = _resolve_collision(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(db.export_snapshot())
    return target


def restore_backup(db: Database, source: Path) -> RestoreResult:
    """Replace the live database wholesale with a backup file's contents.

    The restore itself does not validate the schema; missing required tables
    are reported so the caller can warn that the next start will reseed.

    Raises:
        RestoreParseError: If the file cannot be read or is not a database.
    """
    try:
        blob = source.read_bytes()
    except OSError as exc:
        raise RestoreParseError(f"Backup file could not be read: {source}: {exc}") from exc

    db.restore_from_snapshot(blob)
    conn = db.initialize()
    present = existing_tables(conn)
    missing = [name for name in REQUIRED_TABLES if name not in present]
    return RestoreResult(source=source, size=len(blob), missing_tables=missing)
