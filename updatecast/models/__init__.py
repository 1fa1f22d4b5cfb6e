"""Updatecast data models: all Pydantic v2, all frozen (immutable)."""

from updatecast.models.artifacts import ArtifactIdentity, ArtifactRecord
from updatecast.models.manifest import FileEntry, ReleaseMetadata, UpdateManifest

__all__ = [
    # artifacts
    "ArtifactIdentity",
    "ArtifactRecord",
    # manifest
    "FileEntry",
    "ReleaseMetadata",
    "UpdateManifest",
]
