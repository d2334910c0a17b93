"""Persistent JSON cache documents, one per summary category.

A document is a single JSON object mapping cache key to entry. Writes replace
the whole document atomically; the pipeline only ever goes through
:meth:`JsonCacheStore.merge`, which never replaces an existing summary.
"""

import asyncio
from collections.abc import Mapping
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any

from eco_summaries.core.categories import Category, get_category
from eco_summaries.core.exceptions import CacheIOError
from eco_summaries.core.types import CacheEntry
from eco_summaries.telemetry import TelemetryContext, TelemetryContextProtocol

log = logging.getLogger(__name__)


class JsonCacheStore:
    """Cache document at ``path``.

    Blocking file I/O runs in a worker thread. Concurrent ``merge`` calls on
    the same store are serialized by an ``asyncio.Lock``; other processes
    writing the same file are not coordinated.
    """

    def __init__(
        self, path: Path | str, *, telemetry: TelemetryContextProtocol | None = None
    ) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()
        self._telemetry = telemetry or TelemetryContext()

    def __repr__(self) -> str:
        return f"JsonCacheStore({str(self.path)!r})"

    async def read(self) -> dict[str, CacheEntry]:
        """Load the document.

        Returns:
            Mapping of key to entry; empty when the file is missing or empty.

        Raises:
            CacheIOError: The file exists but cannot be read or is not a JSON
                object.
        """
        with self._telemetry("summaries.store.read", path=str(self.path)):
            raw = await asyncio.to_thread(self._read_text)
        return self._parse(raw)

    async def write(self, entries: Mapping[str, CacheEntry]) -> None:
        """Replace the document with ``entries``, creating parent directories."""
        document = {key: entry.to_dict() for key, entry in entries.items()}
        with self._telemetry("summaries.store.write", entries=len(document)):
            await asyncio.to_thread(self._write_text, document)
        log.debug("Wrote %d entries to %s", len(document), self.path)

    async def merge(self, new_entries: Mapping[str, CacheEntry]) -> dict[str, CacheEntry]:
        """Add ``new_entries`` whose keys do not already hold a summary.

        The document is re-read under the store lock, so entries written by
        another batch since this one started are kept.

        Returns:
            The document as written.
        """
        async with self._lock:
            current = await self.read()
            added = 0
            for key, entry in new_entries.items():
                existing = current.get(key)
                if existing is not None and existing.has_summary:
                    log.debug("Keeping existing summary for %r", key)
                    continue
                current[key] = entry
                added += 1
            if added:
                await self.write(current)
            return current

    def _read_text(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise CacheIOError(self.path, f"unreadable: {e}") from e

    def _parse(self, raw: str | None) -> dict[str, CacheEntry]:
        if raw is None or not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CacheIOError(self.path, f"not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise CacheIOError(
                self.path, f"expected a JSON object, got {type(data).__name__}"
            )

        entries: dict[str, CacheEntry] = {}
        for key, value in data.items():
            if not isinstance(value, dict):
                log.warning("Ignoring non-object cache entry %r in %s", key, self.path)
                continue
            entries[key] = CacheEntry.from_dict(value)
        return entries

    def _write_text(self, document: dict[str, Any]) -> None:
        # Non-JSON echoed values are stored as str().
        try:
            text = json.dumps(document, indent=2, ensure_ascii=False, default=str)
        except (TypeError, ValueError) as e:
            raise CacheIOError(self.path, f"cannot serialize document: {e}") from e

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
        except OSError as e:
            raise CacheIOError(self.path, f"cannot create temporary file: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise CacheIOError(self.path, f"write failed: {e}") from e


class StoreRegistry:
    """Hands out one :class:`JsonCacheStore` per category under ``cache_dir``."""

    def __init__(
        self, cache_dir: Path | str, *, telemetry: TelemetryContextProtocol | None = None
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self._telemetry = telemetry
        self._stores: dict[str, JsonCacheStore] = {}

    def get(self, category: str | Category) -> JsonCacheStore:
        cat = get_category(category)
        store = self._stores.get(cat.name)
        if store is None:
            store = JsonCacheStore(
                self.cache_dir / cat.document_name, telemetry=self._telemetry
            )
            self._stores[cat.name] = store
        return store

    def __getitem__(self, category: str | Category) -> JsonCacheStore:
        return self.get(category)


__all__ = ["JsonCacheStore", "StoreRegistry"]
