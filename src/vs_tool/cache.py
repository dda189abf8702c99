"""Persistent on-disk cache with per-key time-to-live."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import time
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from typing import Any, TypeVar

CACHE_VERSION = 1

logger = logging.getLogger("vs_tool.cache")

T = TypeVar("T")

_DEFAULT = object()


class CacheStore:
    """Key-value store with one JSON file per key.

    Entries past their TTL read as absent and are removed on read. Entries
    stored with ``ttl=None`` never expire. A corrupt or unreadable entry also
    reads as absent so the caller can repopulate it.
    """

    def __init__(
        self,
        directory: os.PathLike | str,
        default_ttl: timedelta | None = timedelta(minutes=10),
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.directory: Path = Path(directory)
        self.default_ttl: timedelta | None = default_ttl
        self._clock: Callable[[], float] = clock

    def _path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode()).hexdigest()[:32]
        return self.directory / f"{digest}.json"

    def get(self, key: str) -> Any | None:
        """Return the stored value, or None if missing, expired or corrupt."""
        path = self._path(key)
        if not path.exists():
            logger.debug("cache miss: %s", key)
            return None

        try:
            entry = json.loads(path.read_text())
            if entry.get("version") != CACHE_VERSION or entry.get("key") != key:
                raise ValueError("unexpected cache entry layout")
            expires_at = entry.get("expires_at")
            value = entry["value"]
        except (OSError, ValueError, KeyError, AttributeError) as e:
            logger.debug("discarding unreadable cache entry %s: %s", key, e)
            return None

        if expires_at is not None and self._clock() >= expires_at:
            logger.debug("cache entry expired: %s", key)
            self.delete(key)
            return None

        logger.debug("cache hit: %s", key)
        return value

    def set(self, key: str, value: Any, ttl: timedelta | None | object = _DEFAULT) -> None:
        """Store a JSON-serializable value.

        ``ttl`` defaults to the store's default TTL; pass ``None`` for an
        entry that never expires.
        """
        if ttl is _DEFAULT:
            ttl = self.default_ttl
        expires_at = None if ttl is None else self._clock() + ttl.total_seconds()  # type: ignore[union-attr]

        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(
            json.dumps(
                {"version": CACHE_VERSION, "key": key, "expires_at": expires_at, "value": value},
                indent=2,
            )
        )
        tmp_path.replace(path)

    def delete(self, key: str) -> None:
        """Remove an entry if present."""
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass

    def clear(self) -> None:
        """Remove every entry, including ones stored without a TTL."""
        if not self.directory.exists():
            return
        for path in self.directory.glob("*.json"):
            path.unlink()

    def cached_lookup(
        self,
        key: str,
        fetch: Callable[[], T | None],
        ttl: timedelta | None | object = _DEFAULT,
    ) -> T | None:
        """Return the cached value for ``key`` or fetch, store and return it.

        ``None`` results are not stored, so a failed fetch is retried on the
        next call.
        """
        value = self.get(key)
        if value is not None:
            return value

        value = fetch()
        if value is not None:
            self.set(key, value, ttl)
        return value
