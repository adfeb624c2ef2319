"""Two-tier expiring cache for binary assets (cover art, character portraits).

Lookups go memory tier, then disk tier, then network:

1. The **memory tier** (:class:`MemoryTier`) holds :class:`CacheEntry`
   objects with an expiration time, bounded by entry count and total payload
   size. It is a pure performance cache; losing it only costs latency.
2. The **disk tier** is one file per asset in a dedicated directory, named by
   the SHA-256 of the asset key. There is no index: a file existing *is* the
   entry. Disk files carry no expiration and are only removed by
   :meth:`AssetCache.clear_cache`.
3. On a miss in both tiers the key is fetched as a URL with :mod:`httpx`
   and written to both tiers.

Disk writes go through a temp file and an atomic rename, so a failed write
never leaves a partial file behind. Disk failures are logged and suppressed.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import shutil
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import httpx

from anidex.config import atomic_write
from anidex.exceptions import AssetNotFoundError
from anidex.models import CacheConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """An immutable cached payload with its absolute expiration time."""

    payload: bytes
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class MemoryTier:
    """Least-recently-used store bounded by entry count and total bytes.

    Every operation takes an internal :class:`threading.Lock`, so concurrent
    callers see consistent check-then-set sequences.

    Args:
        max_entries: Maximum number of entries held.
        max_bytes: Approximate budget for the summed payload sizes.
    """

    def __init__(self, max_entries: int = 100, max_bytes: int = 50 * 1024 * 1024) -> None:
        self.max_entries = max_entries
        self.max_bytes = max_bytes
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._total_bytes = 0
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for *key* and mark it most recently used."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
            return entry

    def set(self, key: str, entry: CacheEntry) -> None:
        """Insert or replace *key*, evicting least recently used entries first."""
        size = len(entry.payload)
        with self._lock:
            self._discard(key)
            if size > self.max_bytes or self.max_entries <= 0:
                return
            while self._entries and (
                len(self._entries) >= self.max_entries
                or self._total_bytes + size > self.max_bytes
            ):
                evicted_key, evicted = self._entries.popitem(last=False)
                self._total_bytes -= len(evicted.payload)
                logger.debug("Evicted %s from memory tier", evicted_key)
            self._entries[key] = entry
            self._total_bytes += size

    def remove(self, key: str) -> None:
        with self._lock:
            self._discard(key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._total_bytes = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    @property
    def total_bytes(self) -> int:
        with self._lock:
            return self._total_bytes

    def snapshot(self) -> tuple[int, int]:
        """Entry count and total bytes, read together."""
        with self._lock:
            return len(self._entries), self._total_bytes

    def _discard(self, key: str) -> None:
        old = self._entries.pop(key, None)
        if old is not None:
            self._total_bytes -= len(old.payload)


def disk_filename(key: str) -> str:
    """Deterministic on-disk file name for an asset key."""
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


class AssetCache:
    """Memory + disk cache for binary assets, falling back to the network.

    Safe to share between concurrent tasks: the memory tier serialises its
    own mutations and two tasks missing on the same key at once simply both
    download and write it, which is harmless.

    Args:
        directory: Directory holding the disk tier. Created if missing.
        config: TTL and memory-tier bounds.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
        clock: Wall clock returning seconds. Injectable for tests.
        timeout: Per-download timeout in seconds.

    Example::

        async with AssetCache(get_cache_dir() / "ImageCache") as cache:
            data = await cache.get_asset("https://cdn.myanimelist.net/images/anime/1/1.jpg")
    """

    def __init__(
        self,
        directory: str | Path,
        config: Optional[CacheConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time,
        timeout: float = 30,
    ) -> None:
        self._config = config or CacheConfig()
        self._directory = Path(directory)
        self._clock = clock
        self._memory = MemoryTier(self._config.max_entries, self._config.max_bytes)
        self._http = httpx.AsyncClient(
            timeout=timeout, follow_redirects=True, transport=transport
        )
        self._ensure_directory()

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def memory(self) -> MemoryTier:
        return self._memory

    async def __aenter__(self) -> AssetCache:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def get_asset(self, key: str) -> bytes:
        """Return the payload for *key*, consulting memory, disk, then network.

        Args:
            key: The asset URL; also the cache key.

        Returns:
            The asset bytes.

        Raises:
            AssetNotFoundError: If the asset is in neither tier and the
                download fails. Nothing is cached in that case.
        """
        now = self._clock()
        entry = self._memory.get(key)
        if entry is not None and not entry.is_expired(now):
            return entry.payload

        payload = await asyncio.to_thread(self._read_disk, key)
        if payload is not None:
            self._memory.set(key, CacheEntry(payload, self._clock() + self._config.ttl_seconds))
            return payload

        payload = await self._download(key)
        self._memory.set(key, CacheEntry(payload, self._clock() + self._config.ttl_seconds))
        await asyncio.to_thread(self._write_disk, key, payload)
        return payload

    def clear_cache(self) -> None:
        """Empty the memory tier and delete every file in the disk tier.

        The directory is recreated empty afterwards. Safe to call repeatedly.
        """
        self._memory.clear()
        try:
            shutil.rmtree(self._directory)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove asset cache at %s: %s", self._directory, exc)
        self._ensure_directory()

    def stats(self) -> dict[str, Any]:
        """Return tier sizes for display.

        Returns:
            A ``dict`` with ``memory_entries``, ``memory_bytes``,
            ``disk_files``, ``disk_bytes`` and ``directory``.
        """
        files = [p for p in self._directory.glob("*") if p.is_file()]
        entries, total = self._memory.snapshot()
        return {
            "memory_entries": entries,
            "memory_bytes": total,
            "disk_files": len(files),
            "disk_bytes": sum(p.stat().st_size for p in files),
            "directory": str(self._directory),
        }

    async def close(self) -> None:
        """Close the HTTP client used for downloads."""
        await self._http.aclose()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _path_for(self, key: str) -> Path:
        return self._directory / disk_filename(key)

    def _ensure_directory(self) -> None:
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Could not create asset cache at %s: %s", self._directory, exc)

    def _read_disk(self, key: str) -> Optional[bytes]:
        if not self._config.enabled:
            return None
        try:
            return self._path_for(key).read_bytes()
        except OSError:
            return None

    def _write_disk(self, key: str, payload: bytes) -> None:
        if not self._config.enabled:
            return
        try:
            atomic_write(self._path_for(key), payload)
        except OSError as exc:
            logger.warning("Could not persist asset %s: %s", key, exc)

    async def _download(self, key: str) -> bytes:
        try:
            url = httpx.URL(key)
        except httpx.InvalidURL as exc:
            raise AssetNotFoundError(f"Invalid asset URL: {key}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise AssetNotFoundError(f"Invalid asset URL: {key}")
        try:
            response = await self._http.get(url)
        except httpx.HTTPError as exc:
            raise AssetNotFoundError(f"Could not download {key}: {exc}") from exc
        if not 200 <= response.status_code <= 299:
            raise AssetNotFoundError(
                f"Could not download {key}: HTTP {response.status_code}"
            )
        logger.debug("Downloaded %s (%d bytes)", key, len(response.content))
        return response.content
