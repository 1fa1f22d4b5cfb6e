"""aiohttp application: the HTTP binding of ``UpdateService``.

Routes
------
- ``GET /updates/latest``      JSON manifest
- ``GET /updates/latest.yml``  electron-updater ``latest.yml``
- ``GET /updates/{filename}``  raw artifact download
- ``GET /health``              liveness check

Resolution and hashing run on a worker thread so a large digest never
blocks the event loop. Every response, errors included, carries
permissive CORS headers; preflight ``OPTIONS`` requests are answered
by the middleware and unmatched paths get a JSON 404.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from aiohttp import web

from updatecast.core.manifest_builder import iso_timestamp
from updatecast.core.renderer import ResponseFormat
from updatecast.core.resolver import ArtifactNotFoundError, InvalidQueryError
from updatecast.core.service import UpdateService

logger = logging.getLogger(__name__)

SERVICE_KEY = web.AppKey("updatecast_service", UpdateService)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Origin, X-Requested-With, Content-Type, Accept",
}


def error_response(status: int, error: str, message: str) -> web.Response:
    """Structured ``{error, message}`` JSON error body."""
    return web.json_response({"error": error, "message": message}, status=status)


@web.middleware
async def cors_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
    if request.method == "OPTIONS":
        return web.Response(status=204, headers=CORS_HEADERS)
    try:
        response = await handler(request)
    except web.HTTPNotFound:
        response = error_response(404, "Not found", f"No route for {request.path}")
    except web.HTTPException as exc:
        exc.headers.update(CORS_HEADERS)
        raise
    response.headers.update(CORS_HEADERS)
    return response


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _latest(request: web.Request, fmt: ResponseFormat) -> web.Response:
    service = request.app[SERVICE_KEY]
    platform = request.query.get("platform")
    arch = request.query.get("arch")
    try:
        body, content_type = await asyncio.to_thread(
            service.render_latest, fmt, platform, arch
        )
    except ArtifactNotFoundError as exc:
        return error_response(
            404,
            "Update file not found",
            f"No update file found for version {exc.identity.version}",
        )
    except InvalidQueryError as exc:
        return error_response(400, "Invalid update query", str(exc))
    except OSError as exc:
        logger.exception("Update check failed")
        return error_response(500, "Internal server error", str(exc))

    logger.info(
        "Served %s manifest (platform=%s, arch=%s)",
        fmt.value,
        platform or "-",
        arch or "-",
    )
    return web.Response(body=body, headers={"Content-Type": content_type})


async def latest_json_handler(request: web.Request) -> web.Response:
    """Update check: JSON manifest with absolute download URLs."""
    return await _latest(request, ResponseFormat.JSON)


async def latest_yml_handler(request: web.Request) -> web.Response:
    """Update check: ``latest.yml`` as expected by electron-updater."""
    return await _latest(request, ResponseFormat.YAML_LIKE)


async def download_handler(request: web.Request) -> web.StreamResponse:
    """Byte-for-byte artifact download from the updates root."""
    service = request.app[SERVICE_KEY]
    filename = request.match_info["filename"]
    path = service.artifact_path(filename)
    if path is None:
        logger.info("Download of missing file: %s", filename)
        return error_response(404, "File not found", f"No such file: {filename}")
    logger.info("Serving download: %s", filename)
    return web.FileResponse(path)


async def health_handler(request: web.Request) -> web.Response:
    """Liveness endpoint; no dependency checks."""
    settings = request.app[SERVICE_KEY].settings
    return web.json_response(
        {
            "status": "ok",
            "timestamp": iso_timestamp(datetime.now(timezone.utc)),
            "server": settings.server_name,
            "version": settings.server_version,
        }
    )


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(service: UpdateService) -> web.Application:
    """Build the aiohttp application around an explicit service context."""
    app = web.Application(middlewares=[cors_middleware])
    app[SERVICE_KEY] = service

    # Fixed routes first so they win over the download pattern
    app.router.add_get("/updates/latest", latest_json_handler)
    app.router.add_get("/updates/latest.yml", latest_yml_handler)
    app.router.add_get("/updates/{filename}", download_handler)
    app.router.add_get("/health", health_handler)
    return app
