"""Server configuration: env-driven, via pydantic-settings.

Reads from a .env file and UPDATECAST_* environment variables. The server
receives an explicit ``ServerSettings`` through ``UpdateService``; the
CLI builds one per invocation.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from updatecast import __version__
from updatecast.models.manifest import ReleaseMetadata


class ServerSettings(BaseSettings):
    """Update server configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export UPDATECAST_UPDATES_DIR=/srv/updates
        export UPDATECAST_PUBLIC_BASE_URL=https://updates.example.com
        export UPDATECAST_RELEASE_VERSION=1.3.0

    Or via .env file::

        UPDATECAST_PORT=8080
        UPDATECAST_STRICT_QUERY=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="UPDATECAST_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"

    # HTTP binding
    host: str = "0.0.0.0"
    port: int = 3000
    public_base_url: str = "http://localhost:3000"
    server_name: str = "Updatecast Update Server"
    server_version: str = __version__

    # Artifact storage and naming
    updates_dir: Path = Path("updates")
    product_name: str = "Product"
    release_version: str = "1.2.0"
    default_platform: str = "win32"
    default_arch: str = "x64"
    known_platforms: list[str] = ["win32", "darwin", "linux"]
    known_archs: list[str] = ["x64", "ia32", "arm64", "armv7l", "universal"]
    platform_extensions: dict[str, str] = {
        "win32": "exe",
        "darwin": "dmg",
        "linux": "AppImage",
    }
    # Reject unknown platform/arch tokens instead of falling back to defaults
    strict_query: bool = False

    # Release metadata served with every manifest
    release_name: str = "Product v1.2.0"
    release_notes: str = ""
    release_date: datetime | None = None

    # Digest computation
    digest_chunk_size: int = 1024 * 1024
    digest_timeout_base_seconds: float = 30.0
    digest_min_throughput_bytes: int = 8 * 1024 * 1024

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"

    def release_metadata(self) -> ReleaseMetadata:
        """Static release fields for the manifest builder."""
        return ReleaseMetadata(
            release_name=self.release_name,
            release_notes=self.release_notes,
            release_date=self.release_date,
        )

    def digest_timeout_for(self, size: int) -> float | None:
        """Upper bound in seconds for hashing an artifact of ``size`` bytes.

        Returns None when digest timeouts are disabled.
        """
        if self.digest_timeout_base_seconds <= 0:
            return None
        throughput = max(self.digest_min_throughput_bytes, 1)
        return self.digest_timeout_base_seconds + size / throughput
