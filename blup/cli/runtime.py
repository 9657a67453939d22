"""
Shared plumbing for CLI commands: invocation state, progress output, and the
async runner that turns library errors into an exit status.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import click

from blup.client import BlupClient
from blup.config import BlupConfig
from blup.core.progress import TransferSession
from blup.exceptions import BlupError
from blup.models.blob import BlobDescriptor

T = TypeVar("T")

ClientFactory = Callable[["CliState"], BlupClient]


class TerminalProgress:
    """Status lines and a carriage-return progress bar on stderr."""

    def on_status(self, message: str) -> None:
        click.echo(message, err=True)

    def on_progress(self, session: TransferSession) -> None:
        click.echo("\r" + session.render(), nl=False, err=True)

    def on_complete(self, session: TransferSession) -> None:
        click.echo("\r" + session.render_complete(), err=True)


def _default_client(state: CliState) -> BlupClient:
    return BlupClient(state.config, account=state.account, listener=TerminalProgress())


@dataclass
class CliState:
    """Options shared by every command of one invocation."""

    account: str | None = None
    verbose: bool = False
    config: BlupConfig | None = None
    client_factory: ClientFactory = field(default=_default_client)


def run(ctx: click.Context, action: Callable[[BlupClient], Awaitable[T]]) -> T:
    """
    Run ``action`` against a client that lives for this command only.

    A BlupError ends the command with ``Error: <message>`` on stderr and exit
    status 1.
    """
    state = ctx.ensure_object(CliState)

    async def _run() -> T:
        async with state.client_factory(state) as client:
            return await action(client)

    try:
        return asyncio.run(_run())
    except BlupError as e:
        click.echo(f"Error: {e.message}", err=True)
        ctx.exit(1)


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


def echo_blob(ctx: click.Context, blob: BlobDescriptor) -> None:
    """Print the blob URL, or the full descriptor in verbose mode."""
    if ctx.ensure_object(CliState).verbose:
        echo_json(blob.to_dict())
    else:
        click.echo(blob.url)
