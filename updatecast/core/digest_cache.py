"""Fingerprint-keyed SHA-512 digest cache with single-flight computation.

A cache entry is valid only while the file's (size, mtime_ns) fingerprint
matches the one it was computed for, so a changed artifact is re-hashed
without any explicit invalidation signal. Entries live for the lifetime
of the process.

Concurrent requests for the same fingerprint share one computation:
the first caller hashes, later callers wait on its future. A failed
computation is reported to every waiter and leaves no entry behind.
A file whose fingerprint changes while it is read is reported as
``ArtifactChangedError``, so a digest is never paired with a stale size.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path

from updatecast.core.hasher import DEFAULT_CHUNK_SIZE, sha512_file

logger = logging.getLogger(__name__)

_Key = tuple[str, int, int]


class ArtifactChangedError(OSError):
    """Raised when a file no longer matches the fingerprint it was hashed for."""


@dataclass
class CacheStats:
    """Counters for cache behaviour."""

    hits: int = 0
    misses: int = 0
    computations: int = 0


class DigestCache:
    """Process-lifetime memo of whole-file SHA-512 digests.

    Parameters
    ----------
    chunk_size:
        Read buffer size used when a digest has to be computed.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._chunk_size = chunk_size
        self._lock = threading.Lock()
        # path -> (size, mtime_ns, digest)
        self._entries: dict[str, tuple[int, int, str]] = {}
        self._inflight: dict[_Key, Future[str]] = {}
        self.stats = CacheStats()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def peek(self, path: Path, size: int, mtime_ns: int) -> str | None:
        """Return the cached digest if the fingerprint matches, else None."""
        with self._lock:
            return self._lookup(str(path), size, mtime_ns)

    def get_or_compute(
        self,
        path: Path,
        size: int,
        mtime_ns: int,
        *,
        timeout: float | None = None,
    ) -> str:
        """Return the SHA-512 hex digest of ``path``.

        ``size`` and ``mtime_ns`` are the fingerprint the caller observed
        when it stat'ed the file. A matching entry is returned without any
        I/O; otherwise the file is streamed and the result stored.

        Raises
        ------
        OSError
            If the file cannot be read (including ``DigestTimeoutError``), or
            ``ArtifactChangedError`` if it no longer matches the fingerprint.
        """
        key: _Key = (str(path), size, mtime_ns)

        with self._lock:
            cached = self._lookup(*key)
            if cached is not None:
                self.stats.hits += 1
                return cached
            self.stats.misses += 1
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future

        if not owner:
            logger.debug("Waiting on in-flight digest for %s", path)
            return future.result()

        try:
            digest = self._compute(path, size, mtime_ns, timeout)
        except BaseException as exc:
            with self._lock:
                del self._inflight[key]
            future.set_exception(exc)
            raise

        with self._lock:
            del self._inflight[key]
        future.set_result(digest)
        return digest

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def invalidate(self, path: Path) -> bool:
        """Drop the entry for ``path``. Returns True if one existed."""
        with self._lock:
            return self._entries.pop(str(path), None) is not None

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lookup(self, path: str, size: int, mtime_ns: int) -> str | None:
        entry = self._entries.get(path)
        if entry is None:
            return None
        cached_size, cached_mtime, digest = entry
        if (cached_size, cached_mtime) != (size, mtime_ns):
            return None
        return digest

    def _compute(
        self, path: Path, size: int, mtime_ns: int, timeout: float | None
    ) -> str:
        logger.debug("Computing SHA-512 for %s (%d bytes)", path, size)
        digest = sha512_file(path, chunk_size=self._chunk_size, timeout=timeout)

        with self._lock:
            self.stats.computations += 1

        # The file may have been replaced while it was being read
        st = os.stat(path)
        if (st.st_size, st.st_mtime_ns) != (size, mtime_ns):
            logger.warning("Artifact %s changed while hashing", path)
            raise ArtifactChangedError(
                f"Artifact {Path(path).name} changed while its digest was computed"
            )

        with self._lock:
            self._entries[str(path)] = (size, mtime_ns, digest)
        return digest
