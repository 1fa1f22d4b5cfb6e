"""HTTP surface of the update service (aiohttp)."""

from updatecast.server.app import SERVICE_KEY, create_app

__all__ = ["SERVICE_KEY", "create_app"]
