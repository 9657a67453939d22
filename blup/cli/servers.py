"""Server list commands for the blup CLI.

Commands:
- server <url>: Add a server (shorthand for server add)
- server add: Add a server at the front of the list
- server list: Show configured servers
- server prefer: Choose the preferred server
"""

from __future__ import annotations

import click

from blup.cli.runtime import run
from blup.client import BlupClient


class ServerGroup(click.Group):
    """Group that treats an unknown first argument as a URL to add."""

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        if args and self.get_command(ctx, args[0]) is None:
            return "add", self.get_command(ctx, "add"), args
        return super().resolve_command(ctx, args)


def _echo_servers(servers: list[str], marker: str) -> None:
    for position, server in enumerate(servers, start=1):
        suffix = f" ({marker})" if position == 1 else ""
        click.echo(f"  {position}. {server}{suffix}")


@click.group(cls=ServerGroup)
def server() -> None:
    """Manage the ordered list of blob servers.

    The first server is the preferred one, used by upload, mirror, list and
    delete.
    """


@server.command("add")
@click.argument("url")
@click.pass_context
def add_server(ctx: click.Context, url: str) -> None:
    """Add a server to the front of your list."""

    async def action(client: BlupClient) -> list[str]:
        return await client.add_server(url)

    servers = run(ctx, action)
    click.echo(f"Server {servers[0]} added to your server list")


@server.command("list")
@click.pass_context
def list_servers(ctx: click.Context) -> None:
    """Show configured servers, as published on the relays."""

    async def action(client: BlupClient) -> list[str]:
        return await client.servers(force_refresh=True)

    servers = run(ctx, action)
    if not servers:
        click.echo("No servers configured. Run 'blup server <url>' to add one.")
        return
    click.echo("Configured servers:")
    _echo_servers(servers, "primary")


@server.command("prefer")
@click.argument("choice", type=click.IntRange(min=1), required=False)
@click.pass_context
def prefer_server(ctx: click.Context, choice: int | None) -> None:
    """Set the preferred server.

    Without CHOICE, lists the servers and asks for a number.
    """
    if choice is None:

        async def fetch(client: BlupClient) -> list[str]:
            return await client.servers(force_refresh=True)

        servers = run(ctx, fetch)
        if not servers:
            click.echo("No servers configured. Run 'blup server <url>' to add one.")
            return
        if len(servers) == 1:
            click.echo("Only one server configured, already preferred.")
            return
        click.echo("Select preferred server:")
        _echo_servers(servers, "current")
        choice = click.prompt("Enter number", type=click.IntRange(1, len(servers)))

    if choice == 1:
        click.echo("Server is already preferred.")
        return

    index = choice - 1

    async def action(client: BlupClient) -> list[str]:
        click.echo("Publishing updated server list...", err=True)
        return await client.prefer_server(index)

    servers = run(ctx, action)
    click.echo(f"{servers[0]} is now your preferred server")
