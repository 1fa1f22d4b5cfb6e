"""Main Typer application: imports and registers all CLI commands.

Entry point: ``updatecast`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from updatecast.cli.commands.artifacts import artifacts_cmd
from updatecast.cli.commands.digest import digest_cmd
from updatecast.cli.commands.latest import latest_cmd
from updatecast.cli.commands.serve import serve_cmd

app = typer.Typer(
    name="updatecast",
    help="Updatecast: application-update distribution service.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="serve", help="Run the update server.")(serve_cmd)
app.command(name="latest", help="Render the manifest for a platform/arch.")(latest_cmd)
app.command(name="artifacts", help="List artifacts in the updates directory.")(artifacts_cmd)
app.command(name="digest", help="Compute the SHA-512 digest of a file.")(digest_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
