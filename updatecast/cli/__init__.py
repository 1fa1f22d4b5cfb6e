"""Updatecast CLI: Typer-based command-line interface.

Provides the ``updatecast`` command with subcommands for running the
update server, previewing the manifest a client would receive, listing
the artifacts in the updates directory and hashing a single file.

All output uses Rich for formatted terminal display.
"""
