"""Update service: the explicit context behind every request.

Holds the settings, the artifact resolver and the process-lifetime digest
cache, and drives the per-request pipeline::

    resolve -> digest -> build -> render

Resolution failures surface as ``ArtifactNotFoundError`` (or
``InvalidQueryError`` in strict mode); digest failures as ``OSError``.
Building and rendering do not fail on attested records.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from updatecast.config import ServerSettings
from updatecast.core.digest_cache import DigestCache
from updatecast.core.manifest_builder import build
from updatecast.core.renderer import ResponseFormat, render
from updatecast.core.resolver import ArtifactNamingPolicy, ArtifactResolver
from updatecast.models.artifacts import ArtifactRecord
from updatecast.models.manifest import UpdateManifest

logger = logging.getLogger(__name__)


class UpdateService:
    """Resolution, attestation and manifest rendering for one updates root.

    Parameters
    ----------
    settings:
        Server configuration. A fresh ``ServerSettings()`` if omitted.
    cache:
        Digest cache to share. A new one is created if not provided.
    """

    def __init__(
        self,
        settings: ServerSettings | None = None,
        cache: DigestCache | None = None,
    ) -> None:
        self.settings = settings or ServerSettings()
        self.cache = cache or DigestCache(chunk_size=self.settings.digest_chunk_size)
        naming = ArtifactNamingPolicy(
            self.settings.product_name, self.settings.platform_extensions
        )
        self.resolver = ArtifactResolver(
            self.settings.updates_dir,
            naming,
            default_version=self.settings.release_version,
            default_platform=self.settings.default_platform,
            default_arch=self.settings.default_arch,
            known_platforms=self.settings.known_platforms,
            known_archs=self.settings.known_archs,
            strict=self.settings.strict_query,
        )

    @property
    def updates_dir(self) -> Path:
        return self.resolver.root

    def ensure_updates_dir(self) -> bool:
        """Create the updates root if missing. Returns True if created."""
        if self.updates_dir.is_dir():
            return False
        self.updates_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Created updates directory: %s", self.updates_dir)
        return True

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------

    def attest(self, record: ArtifactRecord) -> ArtifactRecord:
        """Return ``record`` with its SHA-512 digest attached."""
        digest = self.cache.get_or_compute(
            record.path,
            record.size,
            record.mtime_ns,
            timeout=self.settings.digest_timeout_for(record.size),
        )
        return record.model_copy(
            update={"digest": digest, "last_verified": datetime.now(timezone.utc)}
        )

    def latest(
        self,
        platform: str | None = None,
        arch: str | None = None,
        *,
        version: str | None = None,
    ) -> UpdateManifest:
        """Resolve, attest and describe the artifact for a request."""
        record = self.attest(self.resolver.resolve(version, platform, arch))
        logger.debug("Attested %s sha512=%s", record.file_name, record.digest[:16])
        return build(
            record,
            self.settings.release_metadata(),
            base_url=self.settings.public_base_url,
        )

    def render_latest(
        self,
        fmt: ResponseFormat | str,
        platform: str | None = None,
        arch: str | None = None,
    ) -> tuple[bytes, str]:
        """``latest`` rendered in ``fmt``; returns ``(body, content_type)``."""
        return render(self.latest(platform, arch), fmt)

    # ------------------------------------------------------------------
    # Storage helpers
    # ------------------------------------------------------------------

    def artifact_path(self, file_name: str) -> Path | None:
        """File to serve for a raw download, or None."""
        return self.resolver.locate(file_name)

    def list_artifacts(self, *, attest: bool = False) -> list[ArtifactRecord]:
        """Artifacts in the updates root, optionally with digests."""
        records = self.resolver.scan()
        if attest:
            records = [self.attest(r) for r in records]
        return records
