"""Manifest construction: artifact record + release metadata -> manifest.

The JSON client expects an absolute download URL in each file entry while
the ``latest.yml`` client resolves the bare file name against its feed
URL; the manifest carries both (``files[].url`` absolute, ``path``
relative) and each renderer picks what its client expects.
"""

from __future__ import annotations

from datetime import datetime, timezone
from urllib.parse import quote

from updatecast.models.artifacts import ArtifactRecord
from updatecast.models.manifest import FileEntry, ReleaseMetadata, UpdateManifest

DOWNLOADS_PREFIX = "/updates"


def iso_timestamp(moment: datetime) -> str:
    """Format like JavaScript's ``Date.toISOString()``: UTC, millis, ``Z``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def download_url(base_url: str, file_name: str) -> str:
    """Absolute URL under which ``file_name`` is served."""
    return f"{base_url.rstrip('/')}{DOWNLOADS_PREFIX}/{quote(file_name)}"


def build(
    record: ArtifactRecord,
    release: ReleaseMetadata,
    *,
    base_url: str,
    issued_at: datetime | None = None,
) -> UpdateManifest:
    """Compose the update manifest for an attested artifact record.

    ``release.release_date`` wins over ``issued_at``; when neither is
    given the current time is used.
    """
    moment = release.release_date or issued_at or datetime.now(timezone.utc)
    entry = FileEntry(
        url=download_url(base_url, record.file_name),
        sha512=record.digest,
        size=record.size,
    )
    return UpdateManifest(
        version=record.identity.version,
        files=[entry],
        path=record.file_name,
        sha512=record.digest,
        release_date=iso_timestamp(moment),
        release_name=release.release_name,
        release_notes=release.release_notes,
    )
