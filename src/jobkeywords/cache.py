"""Content-addressable fetch cache.

Maps a posting URL to the extraction result computed the first time the
URL was processed, or to a **tombstone** meaning "fetched once, no usable
data".  One JSON file per URL lives under the cache root; the filename is
the hexadecimal ``xxh3_64`` digest of the normalised URL.

The key is derived from the URL only — not from the extractor set or the
scoring model that produced the value.  Re-running with different
extractors returns the cached result until the entry is deleted
(``jobkeywords forget <url>``).  ``xxh3_64`` is a fast non-cryptographic
hash; collisions are an accepted risk, not a security boundary.

File contents:

- ``null``                      — tombstone
- ``{"source": ..., ...}``      — serialised :class:`ExtractionResult`
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

import xxhash

from jobkeywords.errors import ActionableError
from jobkeywords.keywords import ExtractionResult
from jobkeywords.logging import logger

DEFAULT_CACHE_DIR = ".cache"


def normalize_url(url: str) -> str:
    """Canonical form used for hashing.

    Strips surrounding whitespace, lowercases scheme and host, and drops
    the fragment.  Path and query are case-sensitive and kept verbatim.
    """
    parts = urlsplit(url.strip())
    return urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, "")
    )


def cache_key(url: str) -> str:
    """Return the cache filename for *url*."""
    return xxhash.xxh3_64(normalize_url(url).encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CacheEntry:
    """A stored value: an extraction result, or ``None`` for a tombstone."""

    result: ExtractionResult | None

    @property
    def is_tombstone(self) -> bool:
        return self.result is None

    @classmethod
    def tombstone(cls) -> CacheEntry:
        return cls(result=None)

    def encode(self) -> str:
        payload = None if self.result is None else self.result.to_dict()
        return json.dumps(payload, ensure_ascii=False)

    @classmethod
    def decode(cls, raw: str) -> CacheEntry:
        """Parse file contents; raises ``ValueError``/``KeyError``/``TypeError``."""
        payload = json.loads(raw)
        if payload is None:
            return cls.tombstone()
        if not isinstance(payload, dict):
            msg = f"expected an object or null, got {type(payload).__name__}"
            raise TypeError(msg)
        return cls(result=ExtractionResult.from_dict(payload))


class FetchCache:
    """One-file-per-URL cache rooted at *root*.

    Blocking file I/O runs on the default executor, so concurrent lookups
    for different URLs never block the event loop or each other.

    Usage::

        cache = FetchCache(".cache")
        entry = await cache.lookup(url)        # CacheEntry | None
        await cache.store(url, CacheEntry(result))
    """

    def __init__(self, root: str | Path = DEFAULT_CACHE_DIR) -> None:
        self.root = Path(root)

    def path_for(self, url: str) -> Path:
        return self.root / cache_key(url)

    # -- async API -----------------------------------------------------------

    async def lookup(self, url: str) -> CacheEntry | None:
        """Return the entry for *url*, or ``None`` when nothing is cached.

        Raises :class:`ActionableError` (CACHE) when an entry exists but
        cannot be read or decoded.  A corrupt entry is never silently
        treated as a miss.
        """
        return await asyncio.to_thread(self.lookup_sync, url)

    async def store(self, url: str, entry: CacheEntry) -> Path:
        """Persist *entry* for *url*.  Raises :class:`ActionableError` (CACHE)."""
        return await asyncio.to_thread(self.store_sync, url, entry)

    # -- blocking implementation ---------------------------------------------

    def lookup_sync(self, url: str) -> CacheEntry | None:
        path = self.path_for(url)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise ActionableError.cache_read(str(path), str(exc)) from None

        try:
            entry = CacheEntry.decode(raw.decode("utf-8"))
        except (ValueError, KeyError, TypeError) as exc:
            raise ActionableError.cache_read(str(path), f"corrupt entry: {exc}") from None

        logger.debug("Cache hit for %s (%s)", url, path.name)
        return entry

    def store_sync(self, url: str, entry: CacheEntry) -> Path:
        path = self.path_for(url)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            # Write-then-rename so a crash never leaves a half-written entry
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=f".{path.name}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(entry.encode())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise ActionableError.cache_write(str(path), str(exc)) from None

        logger.debug("Cached %s for %s", "tombstone" if entry.is_tombstone else "result", url)
        return path

    def forget(self, url: str) -> bool:
        """Delete the entry for *url*.  Returns ``True`` if one existed."""
        path = self.path_for(url)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise ActionableError.cache_write(str(path), str(exc)) from None
        logger.info("Removed cache entry %s for %s", path.name, url)
        return True
