# ABOUTME: Seed database sources used on first run and on stale-schema reseed.
# ABOUTME: Builds the bundled seed in-process, or loads one from a file or HTTP URL.

import logging
import sqlite3
import time
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import httpx

from shelfkeeper.db.schema import DEMO_DATA, SCHEMA_V1

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class SeedFetchError(Exception):
    """Raised when a seed database blob cannot be obtained."""


@runtime_checkable
class SeedSource(Protocol):
    """Protocol for anything that can hand back a serialized seed database."""

    def fetch(self) -> bytes: ...


class BundledSeed:
    """Seed built from the bundled schema, optionally with demo rows."""

    def __init__(self, *, with_demo: bool = True, extra_sql: str = "") -> None:
        self._with_demo = with_demo
        self._extra_sql = extra_sql

    def fetch(self) -> bytes:
        conn = sqlite3.connect(":memory:")
        try:
            conn.executescript(SCHEMA_V1)
            if self._with_demo:
                conn.executescript(DEMO_DATA)
            if self._extra_sql:
                conn.executescript(self._extra_sql)
            conn.commit()
            return conn.serialize()
        except sqlite3.Error as exc:
            raise SeedFetchError(f"Bundled seed could not be built: {exc}") from exc
        finally:
            conn.close()


class FileSeed:
    """Seed read from a database file on disk."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def fetch(self) -> bytes:
        try:
            return self._path.read_bytes()
        except OSError as exc:
            raise SeedFetchError(f"Seed DB read failed: {self._path}: {exc}") from exc


class HttpSeed:
    """Seed downloaded from a URL, with retry for transient failures (429, 5xx)."""

    def __init__(
        self,
        url: str,
        *,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": "shelfkeeper/0.1.0"},
            "timeout": 30.0,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client_kwargs = client_kwargs
        self._url = url
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    def fetch(self) -> bytes:
        """Download the seed file.

        Raises:
            SeedFetchError: On non-retryable HTTP errors or exhausted retries.
        """
        with httpx.Client(**self._client_kwargs) as client:
            return self._fetch_with(client)

    def _fetch_with(self, client: httpx.Client) -> bytes:
        attempts = 1 + self._max_retries
        last_status = 0
        for attempt in range(attempts):
            try:
                response = client.get(self._url)
                last_status = response.status_code
            except httpx.HTTPError as exc:
                raise SeedFetchError(f"Seed DB fetch failed: {self._url}: {exc}") from exc

            if response.status_code == 200:
                return response.content

            if response.status_code not in _RETRYABLE_STATUS_CODES:
                raise SeedFetchError(f"Seed DB fetch failed: HTTP {response.status_code}")

            if attempt < attempts - 1:
                delay = self._retry_delay * (2**attempt)
                logger.warning(
                    "HTTP %d from %s, retrying in %.1fs (attempt %d/%d)",
                    response.status_code,
                    self._url,
                    delay,
                    attempt + 1,
                    self._max_retries,
                )
                time.sleep(delay)

        raise SeedFetchError(
            f"Seed DB fetch failed: HTTP {last_status} from {self._url} after {attempts} attempts"
        )


def seed_from_location(location: str | None) -> SeedSource:
    """Pick a seed source for a CLI-style location string.

    None selects the bundled seed; http(s) URLs use HttpSeed; anything else
    is treated as a file path.
    """
    if not location:
        return BundledSeed()
    if location.startswith(("http://", "https://")):
        return HttpSeed(location)
    return FileSeed(Path(location))
