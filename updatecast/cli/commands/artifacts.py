"""``updatecast artifacts``: list installers in the updates directory."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from updatecast.config import ServerSettings
from updatecast.core.service import UpdateService

console = Console()


def artifacts_cmd(
    digests: bool = typer.Option(
        False, "--digests/--no-digests", help="Compute SHA-512 for each artifact."
    ),
) -> None:
    """Show every file matching the artifact naming template."""
    service = UpdateService(ServerSettings())
    try:
        records = service.list_artifacts(attest=digests)
    except OSError as exc:
        console.print(f"[bold red]Digest failed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    if not records:
        console.print(f"[dim]No artifacts in {service.updates_dir}.[/dim]")
        return

    table = Table(title=f"Artifacts in {service.updates_dir}")
    table.add_column("File", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Platform")
    table.add_column("Arch")
    table.add_column("Size", justify="right")
    if digests:
        table.add_column("SHA-512", overflow="fold")

    for r in records:
        row = [
            r.file_name,
            r.identity.version,
            r.identity.platform,
            r.identity.arch,
            str(r.size),
        ]
        if digests:
            row.append(r.digest)
        table.add_row(*row)

    console.print(table)
