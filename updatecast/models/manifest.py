"""Update manifest value objects (format-agnostic)."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FileEntry(BaseModel):
    """One downloadable file of a manifest."""

    model_config = ConfigDict(frozen=True)

    url: str
    sha512: str
    size: int


class UpdateManifest(BaseModel):
    """What an auto-update client needs to decide whether and how to fetch.

    Field aliases follow the electron-updater wire names, so
    ``model_dump(by_alias=True)`` yields the client-facing keys.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str
    files: list[FileEntry]
    path: str
    sha512: str
    release_date: str = Field(alias="releaseDate")  # ISO-8601, UTC
    release_name: str = Field(alias="releaseName")
    release_notes: str = Field(alias="releaseNotes")


class ReleaseMetadata(BaseModel):
    """Static release fields taken from configuration, not from the artifact."""

    model_config = ConfigDict(frozen=True)

    release_name: str
    release_notes: str = ""
    release_date: datetime | None = None  # None: stamp with build time
