"""Streaming SHA-512 helpers for artifact attestation.

Installer artifacts can be hundreds of megabytes, so files are always
read through a fixed-size buffer into an incremental hash; the whole
file is never held in memory.
"""

from __future__ import annotations

import hashlib
import time
from pathlib import Path

DEFAULT_CHUNK_SIZE = 1024 * 1024


class DigestTimeoutError(TimeoutError):
    """Raised when hashing an artifact overruns its deadline."""


def sha512_hex(data: bytes) -> str:
    """Return the SHA-512 hex digest of raw bytes."""
    return hashlib.sha512(data).hexdigest()


def sha512_file(
    path: Path,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    timeout: float | None = None,
) -> str:
    """Stream ``path`` through SHA-512 and return the hex digest.

    Parameters
    ----------
    path:
        File to hash.
    chunk_size:
        Read buffer size in bytes.
    timeout:
        Optional wall-clock budget in seconds, checked between chunks.
        On overrun the stream is closed and ``DigestTimeoutError`` raised.

    Raises
    ------
    OSError
        If the file cannot be opened or read.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    deadline = time.monotonic() + timeout if timeout is not None else None
    digest = hashlib.sha512()
    with open(path, "rb") as fh:
        while chunk := fh.read(chunk_size):
            digest.update(chunk)
            if deadline is not None and time.monotonic() > deadline:
                raise DigestTimeoutError(
                    f"Digest of {Path(path).name} exceeded {timeout:.1f}s"
                )
    return digest.hexdigest()
