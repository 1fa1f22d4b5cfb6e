"""Artifact identity and per-request artifact records."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class ArtifactIdentity(BaseModel):
    """The logical identity of one installer artifact.

    Maps to exactly one file name through ``ArtifactNamingPolicy``.
    """

    model_config = ConfigDict(frozen=True)

    product: str
    version: str
    platform: str
    arch: str


class ArtifactRecord(BaseModel):
    """A resolved artifact on storage.

    Rebuilt from filesystem state on every request. ``digest`` stays empty
    until the digest cache attests the file; ``last_verified`` records when.
    """

    model_config = ConfigDict(frozen=True)

    identity: ArtifactIdentity
    path: Path
    file_name: str
    size: int
    mtime_ns: int
    digest: str = ""  # SHA-512 hex
    last_verified: datetime | None = None
