"""Shared test fixtures for Updatecast."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from updatecast.config import ServerSettings
from updatecast.core.digest_cache import DigestCache
from updatecast.core.service import UpdateService

PRODUCT = "Product"
VERSION = "1.2.0"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep UPDATECAST_* variables and any .env file out of the tests."""
    for key in list(os.environ):
        if key.startswith("UPDATECAST_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def updates_dir(tmp_path: Path) -> Path:
    """Provide an empty updates directory."""
    path = tmp_path / "updates"
    path.mkdir()
    return path


@pytest.fixture
def make_artifact(updates_dir: Path) -> Callable[..., Path]:
    """Factory fixture: write an installer following the naming template."""

    def _factory(
        platform: str = "win32",
        arch: str = "x64",
        *,
        content: bytes = b"\x00" * 1024,
        version: str = VERSION,
        ext: str | None = None,
    ) -> Path:
        ext = ext or {"win32": "exe", "darwin": "dmg", "linux": "AppImage"}[platform]
        path = updates_dir / f"{PRODUCT}-{version}-{platform}-{arch}.{ext}"
        path.write_bytes(content)
        return path

    return _factory


@pytest.fixture
def settings(updates_dir: Path) -> ServerSettings:
    """Settings pointed at the temp updates directory."""
    return ServerSettings(
        updates_dir=updates_dir,
        product_name=PRODUCT,
        release_version=VERSION,
        public_base_url="http://localhost:3000",
        release_name="Product v1.2.0",
        release_notes="Online updates, assorted fixes",
    )


@pytest.fixture
def cache() -> DigestCache:
    """Provide an isolated digest cache."""
    return DigestCache(chunk_size=256)


@pytest.fixture
def service(settings: ServerSettings, cache: DigestCache) -> UpdateService:
    """Provide an UpdateService wired to the temp directory and cache."""
    return UpdateService(settings, cache=cache)
