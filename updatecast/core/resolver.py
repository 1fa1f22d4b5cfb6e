"""Artifact resolution: logical request to a concrete file on storage.

Storage layout: a single flat directory of installers named
``<product>-<version>-<platform>-<arch>.<ext>``. The directory contents
are the only source of truth; there is no manifest file or database.
Absence of the exact expected file is a definitive not-found outcome.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

from updatecast.models.artifacts import ArtifactIdentity, ArtifactRecord

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "bin"


class ArtifactNotFoundError(LookupError):
    """Raised when no file exists for the requested version/platform/arch."""

    def __init__(self, identity: ArtifactIdentity, file_name: str) -> None:
        super().__init__(f"Update file not found: {file_name}")
        self.identity = identity
        self.file_name = file_name


class InvalidQueryError(ValueError):
    """Raised in strict mode for a platform or arch token that is not known."""


class ArtifactNamingPolicy:
    """The fixed file naming template and its per-platform extensions.

    Parameters
    ----------
    product:
        Product name, the first template segment.
    extensions:
        Installer extension per platform token (e.g. win32 -> exe).
    """

    def __init__(self, product: str, extensions: Mapping[str, str]) -> None:
        self.product = product
        self._extensions = dict(extensions)

    def extension_for(self, platform: str) -> str:
        """Installer extension for ``platform``."""
        return self._extensions.get(platform, DEFAULT_EXTENSION)

    def file_name(self, identity: ArtifactIdentity) -> str:
        """Apply the template to an identity."""
        ext = self.extension_for(identity.platform)
        return (
            f"{identity.product}-{identity.version}-"
            f"{identity.platform}-{identity.arch}.{ext}"
        )

    def parse(self, file_name: str) -> ArtifactIdentity | None:
        """Invert ``file_name``; returns None for names outside the template.

        Product names may themselves contain dashes, so only names that
        start with this policy's product are recognised.
        """
        prefix = f"{self.product}-"
        if not file_name.startswith(prefix):
            return None
        stem, dot, ext = file_name[len(prefix):].rpartition(".")
        if not dot:
            return None
        parts = stem.rsplit("-", 2)
        if len(parts) != 3 or not all(parts):
            return None
        version, platform, arch = parts
        if ext != self.extension_for(platform):
            return None
        return ArtifactIdentity(
            product=self.product, version=version, platform=platform, arch=arch
        )


class ArtifactResolver:
    """Maps (version, platform, arch) onto a file under the updates root.

    Missing tokens take the configured defaults. Unknown platform or arch
    tokens also fall back to the defaults (with a warning) unless
    ``strict`` is set, in which case ``InvalidQueryError`` is raised.
    """

    def __init__(
        self,
        root: Path,
        naming: ArtifactNamingPolicy,
        *,
        default_version: str,
        default_platform: str = "win32",
        default_arch: str = "x64",
        known_platforms: Iterable[str] = ("win32", "darwin", "linux"),
        known_archs: Iterable[str] = ("x64", "ia32", "arm64"),
        strict: bool = False,
    ) -> None:
        self.root = Path(root)
        self.naming = naming
        self.default_version = default_version
        self.default_platform = default_platform
        self.default_arch = default_arch
        self._known_platforms = frozenset(known_platforms)
        self._known_archs = frozenset(known_archs)
        self._strict = strict

    # ------------------------------------------------------------------
    # Query normalisation
    # ------------------------------------------------------------------

    def _normalise(
        self, kind: str, value: str | None, default: str, known: frozenset[str]
    ) -> str:
        if not value:
            return default
        if value in known:
            return value
        if self._strict:
            raise InvalidQueryError(f"Unsupported {kind}: {value!r}")
        logger.warning(
            "Unknown %s %r requested; falling back to %r", kind, value, default
        )
        return default

    def identity_for(
        self,
        version: str | None = None,
        platform: str | None = None,
        arch: str | None = None,
    ) -> ArtifactIdentity:
        """Build the identity a request refers to, defaults applied."""
        return ArtifactIdentity(
            product=self.naming.product,
            version=version or self.default_version,
            platform=self._normalise(
                "platform", platform, self.default_platform, self._known_platforms
            ),
            arch=self._normalise("arch", arch, self.default_arch, self._known_archs),
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(
        self,
        version: str | None = None,
        platform: str | None = None,
        arch: str | None = None,
    ) -> ArtifactRecord:
        """Locate the artifact for a request.

        Raises
        ------
        ArtifactNotFoundError
            If the expected file does not exist under the updates root.
        InvalidQueryError
            In strict mode, for unknown platform or arch tokens.
        """
        identity = self.identity_for(version, platform, arch)
        file_name = self.naming.file_name(identity)
        path = self.root / file_name
        if not path.is_file():
            logger.info("Update file does not exist: %s", file_name)
            raise ArtifactNotFoundError(identity, file_name)
        return self._record(identity, path)

    def scan(self) -> list[ArtifactRecord]:
        """Every file in the updates root that matches the naming template."""
        if not self.root.is_dir():
            return []
        records: list[ArtifactRecord] = []
        for path in sorted(self.root.iterdir()):
            if not path.is_file():
                continue
            identity = self.naming.parse(path.name)
            if identity is not None:
                records.append(self._record(identity, path))
        return records

    def locate(self, file_name: str) -> Path | None:
        """Path of a plain file directly under the updates root, if any.

        Names carrying path separators or parent references never match.
        """
        if file_name in ("", ".", "..") or "/" in file_name or "\\" in file_name:
            return None
        path = self.root / file_name
        return path if path.is_file() else None

    @staticmethod
    def _record(identity: ArtifactIdentity, path: Path) -> ArtifactRecord:
        st = path.stat()
        return ArtifactRecord(
            identity=identity,
            path=path.resolve(),
            file_name=path.name,
            size=st.st_size,
            mtime_ns=st.st_mtime_ns,
        )
