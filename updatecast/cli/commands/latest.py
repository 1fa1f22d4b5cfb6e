"""``updatecast latest``: preview the manifest a client would receive."""

from __future__ import annotations

import typer
from rich.console import Console

from updatecast.config import ServerSettings
from updatecast.core.renderer import ResponseFormat
from updatecast.core.resolver import ArtifactNotFoundError, InvalidQueryError
from updatecast.core.service import UpdateService

console = Console()


def latest_cmd(
    platform: str = typer.Option(None, "--platform", help="Client platform token."),
    arch: str = typer.Option(None, "--arch", help="Client architecture token."),
    fmt: ResponseFormat = typer.Option(
        ResponseFormat.JSON, "--format", "-f", help="Manifest wire format."
    ),
) -> None:
    """Resolve, hash and render the current release for a platform/arch."""
    service = UpdateService(ServerSettings())
    try:
        body, _ = service.render_latest(fmt, platform, arch)
    except ArtifactNotFoundError as exc:
        console.print(f"[bold red]Not found:[/bold red] {exc.file_name}")
        raise typer.Exit(code=1)
    except InvalidQueryError as exc:
        console.print(f"[bold red]Invalid query:[/bold red] {exc}")
        raise typer.Exit(code=2)
    except OSError as exc:
        console.print(f"[bold red]Digest failed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print(body.decode("utf-8"), soft_wrap=True, markup=False, highlight=False)
