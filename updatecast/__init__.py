"""Updatecast: application-update distribution service.

Answers version-check queries from auto-update clients and serves
installer artifacts with integrity metadata:
  - Deterministic artifact resolution from a flat updates directory
  - Streaming SHA-512 attestation with a fingerprint-keyed digest cache
  - JSON and electron-updater ``latest.yml`` manifest formats
  - aiohttp server with permissive CORS and static downloads
  - Env-driven configuration via pydantic-settings
"""

__version__ = "1.0.0"
__description__ = "Application-update distribution service with SHA-512 attestation"

from updatecast.core.service import UpdateService

__all__ = ["UpdateService", "__version__"]
