"""``updatecast digest FILE``: SHA-512 of a single file."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from updatecast.config import ServerSettings
from updatecast.core.hasher import sha512_file

console = Console()


def digest_cmd(
    path: Path = typer.Argument(..., help="File to hash."),
) -> None:
    """Print the hex SHA-512 digest and size of a file."""
    if not path.is_file():
        console.print(f"[bold red]Not a file:[/bold red] {path}")
        raise typer.Exit(code=1)
    try:
        digest = sha512_file(path, chunk_size=ServerSettings().digest_chunk_size)
    except OSError as exc:
        console.print(f"[bold red]Digest failed:[/bold red] {exc}")
        raise typer.Exit(code=1)
    console.print(f"sha512: {digest}", soft_wrap=True)
    console.print(f"size: {path.stat().st_size}")
