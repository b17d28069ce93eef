# ABOUTME: Key/value blob stores that hold the serialized library database.
# ABOUTME: Provides the StorageAdapter protocol plus file-backed and in-memory adapters.

import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

STORAGE_KEY = "library.db"
DEFAULT_STORE_DIR = Path.home() / ".shelfkeeper"


@runtime_checkable
class StorageAdapter(Protocol):
    """Protocol for a store that keeps one binary blob per key."""

    def get(self, key: str) -> bytes | None: ...

    def put(self, key: str, blob: bytes) -> None: ...


class FileStorage:
    """Stores each key as a file inside a directory.

    Writes go to a temporary sibling file that is then renamed over the
    target, so a reader never sees a half-written blob.
    """

    def __init__(self, root: Path | None = None) -> None:
        self._root = root or DEFAULT_STORE_DIR

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        """Return the file path that backs the given key."""
        return self._root / key

    def get(self, key: str) -> bytes | None:
        path = self.path_for(key)
        if not path.is_file():
            return None
        return path.read_bytes()

    def put(self, key: str, blob: bytes) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        target = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(blob)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class MemoryStorage:
    """Dict-backed storage for tests and embedding."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._blobs: dict[str, bytes] = dict(initial or {})
        self.put_count = 0

    def get(self, key: str) -> bytes | None:
        return self._blobs.get(key)

    def put(self, key: str, blob: bytes) -> None:
        self._blobs[key] = bytes(blob)
        self.put_count += 1
