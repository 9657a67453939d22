"""Identity commands for the blup CLI.

Commands:
- create: Create a new account
- accounts: List accounts
- use: Switch the active account
- config: Import existing keys
"""

from __future__ import annotations

import click

from blup.cli.runtime import CliState, run
from blup.client import BlupClient, CreatedAccount
from blup.config import BlupConfig
from blup.services.account_service import DEFAULT_ACCOUNT, AccountInfo


@click.command()
@click.argument("name", default=DEFAULT_ACCOUNT)
@click.pass_context
def create(ctx: click.Context, name: str) -> None:
    """Create a new Nostr account.

    Generates a key pair, stores it in the system keychain, and publishes a
    default server list and relay list.
    """

    async def action(client: BlupClient) -> CreatedAccount:
        return await client.create_account(name)

    created = run(ctx, action)
    click.echo(f"Account '{created.name}' created")
    click.echo(f"npub: {created.keypair.npub}")
    click.echo(f"nsec: {created.keypair.nsec}")
    click.echo("")
    click.echo("Save your nsec somewhere safe. It won't be shown again.")
    click.echo(f"Default blossom server: {created.server}")
    if not created.server_list_published:
        click.echo("Note: Could not publish server list (non-fatal)")
    if created.relay_list_published:
        config = ctx.ensure_object(CliState).config or BlupConfig()
        click.echo(f"Relay list (NIP-65) published to {', '.join(config.lookup_relays)}")
    else:
        click.echo("Note: Could not publish relay list (non-fatal)")


@click.command("accounts")
@click.pass_context
def list_accounts(ctx: click.Context) -> None:
    """List all accounts."""

    async def action(client: BlupClient) -> list[AccountInfo]:
        return client.list_accounts()

    accounts = run(ctx, action)
    if not accounts:
        click.echo("No accounts. Run 'blup create' to create one.")
        return

    click.echo("Accounts:")
    for info in accounts:
        marker = " (active)" if info.active else ""
        click.echo(f"  {info.name}{marker}: {info.npub or 'unknown'}")


@click.command()
@click.argument("name")
@click.pass_context
def use(ctx: click.Context, name: str) -> None:
    """Switch the active account."""

    async def action(client: BlupClient) -> None:
        client.use_account(name)

    run(ctx, action)
    click.echo(f"Switched to account '{name}'")


@click.command("config")
@click.argument("keys", nargs=-1, required=True)
@click.pass_context
def import_keys(ctx: click.Context, keys: tuple[str, ...]) -> None:
    """Import existing keys into the system keychain.

    \b
        blup config <npub> <nsec>
        blup config <name> <npub> <nsec>
    """
    match keys:
        case (npub, nsec):
            name = DEFAULT_ACCOUNT
        case (name, npub, nsec):
            pass
        case _:
            raise click.UsageError("expected [NAME] NPUB NSEC")

    async def action(client: BlupClient) -> None:
        client.import_account(name, npub, nsec)

    run(ctx, action)
    click.echo(f"Credentials for '{name}' stored in system keychain")
