"""Command-line interface for blup.

This module provides the main CLI entry point and assembles all commands.

Commands:
- create: Create a new Nostr account
- profile: Show or update your profile
- accounts: List all accounts
- use: Switch the active account
- config: Import existing keys
- server: Manage the server list
- upload: Upload a file
- mirror: Mirror a URL
- list: List your blobs
- delete: Delete a blob by hash

Shorthands: ``blup <file>`` uploads an existing file and ``blup <url>``
mirrors an http(s) URL.
"""

from __future__ import annotations

import os
from pathlib import Path

import click

from blup.cli.accounts import create, import_keys, list_accounts, use
from blup.cli.blobs import delete, list_blobs, mirror, upload
from blup.cli.profile import profile
from blup.cli.runtime import CliState
from blup.cli.servers import server
from blup.config import BlupConfig
from blup.core.logging import setup_logging


class BlupGroup(click.Group):
    """Group that routes a bare URL to ``mirror`` and a bare file path to ``upload``."""

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        if args and self.get_command(ctx, args[0]) is None:
            target = args[0]
            if target.startswith(("http://", "https://")):
                return "mirror", self.get_command(ctx, "mirror"), args
            if Path(target).is_file():
                return "upload", self.get_command(ctx, "upload"), args
        return super().resolve_command(ctx, args)


@click.group(cls=BlupGroup)
@click.version_option(package_name="blup")
@click.option("--as", "account", metavar="NAME", help="Use a specific account for this command.")
@click.option("--verbose", "-v", is_flag=True, help="Show full JSON output for uploads.")
@click.option("--debug", is_flag=True, help="Enable debug logging on stderr.")
@click.pass_context
def cli(ctx: click.Context, account: str | None, verbose: bool, debug: bool) -> None:
    """blup - Nostr identity & Blossom file manager."""
    setup_logging("DEBUG" if debug else os.environ.get("BLUP_LOG_LEVEL", "WARNING"))

    state = ctx.ensure_object(CliState)
    state.account = account
    state.verbose = verbose
    if state.config is None:
        try:
            state.config = BlupConfig.from_env()
        except ValueError as e:
            raise click.UsageError(str(e)) from e


# Identity commands
cli.add_command(create)
cli.add_command(profile)
cli.add_command(list_accounts)
cli.add_command(use)
cli.add_command(import_keys)

# Server commands
cli.add_command(server)

# Blob commands
cli.add_command(upload)
cli.add_command(mirror)
cli.add_command(list_blobs)
cli.add_command(delete)


def main() -> None:
    cli(obj=CliState())


__all__ = ["cli", "main"]
