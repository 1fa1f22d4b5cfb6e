"""``updatecast serve``: run the update server.

Bootstraps the updates directory, logs the endpoint banner and the
expected artifact layout, then hands over to ``aiohttp.web.run_app``.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from aiohttp import web
from rich.logging import RichHandler

from updatecast.config import ServerSettings
from updatecast.core.service import UpdateService
from updatecast.models.artifacts import ArtifactIdentity
from updatecast.server.app import create_app

logger = logging.getLogger("updatecast")


def configure_logging(level: str) -> None:
    """Route all logging through Rich at ``level``."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def log_banner(service: UpdateService, base_url: str) -> None:
    """Startup banner: endpoints, storage root and naming convention."""
    cfg = service.settings
    naming = service.resolver.naming
    logger.info("=== %s v%s ===", cfg.server_name, cfg.server_version)
    logger.info("Server address: %s", base_url)
    logger.info("Update check (JSON): %s/updates/latest", base_url)
    logger.info("Update check (YAML): %s/updates/latest.yml", base_url)
    logger.info("Health check: %s/health", base_url)
    logger.info("Updates directory: %s", service.updates_dir.resolve())
    logger.info(
        "File name format: %s",
        naming.file_name(
            ArtifactIdentity(
                product=naming.product,
                version=cfg.release_version,
                platform=cfg.default_platform,
                arch=cfg.default_arch,
            )
        ),
    )
    logger.info("Expected layout:")
    for platform in cfg.known_platforms:
        example = ArtifactIdentity(
            product=naming.product,
            version=cfg.release_version,
            platform=platform,
            arch=cfg.default_arch,
        )
        logger.info("  %s/%s", service.updates_dir, naming.file_name(example))
    if cfg.strict_query:
        logger.info("Strict query mode: unknown platform/arch tokens are rejected")


def serve_cmd(
    host: str = typer.Option(None, "--host", help="Interface to bind."),
    port: int = typer.Option(None, "--port", "-p", help="TCP port to listen on."),
    updates_dir: Path = typer.Option(
        None, "--updates-dir", "-d", help="Directory holding the installers."
    ),
    base_url: str = typer.Option(
        None, "--base-url", help="Public base URL used in download links."
    ),
) -> None:
    """Run the update server until interrupted."""
    overrides = {
        key: value
        for key, value in {
            "host": host,
            "port": port,
            "updates_dir": updates_dir,
            "public_base_url": base_url,
        }.items()
        if value is not None
    }
    cfg = ServerSettings(**overrides)
    configure_logging(cfg.log_level)

    service = UpdateService(cfg)
    service.ensure_updates_dir()
    log_banner(service, cfg.public_base_url.rstrip("/"))

    web.run_app(create_app(service), host=cfg.host, port=cfg.port, print=None)
