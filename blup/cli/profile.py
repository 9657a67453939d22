"""Profile command for the blup CLI."""

from __future__ import annotations

import os
import subprocess

import click
import structlog

from blup.cli.runtime import run
from blup.client import BlupClient
from blup.models.nostr import ProfileMetadata

logger = structlog.get_logger(__name__)

_PROFILE_LABELS = (
    ("name", "Name"),
    ("about", "About"),
    ("picture", "Picture"),
    ("banner", "Banner"),
    ("nip05", "NIP-05"),
    ("lud16", "Lightning"),
)


def echo_profile(profile: ProfileMetadata) -> None:
    for field_name, label in _PROFILE_LABELS:
        if value := getattr(profile, field_name):
            click.echo(f"  {label + ':':<10} {value}")


def display_image(url: str) -> None:
    """Show ``url`` inline when running inside the kitty terminal."""
    if not os.environ.get("KITTY_PID"):
        return
    try:
        subprocess.run(["kitten", "icat", "--align=left", url], check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.debug("Inline image display failed", error=str(e))


@click.command()
@click.option("--name", help="Display name.")
@click.option("--about", help="Short bio.")
@click.option("--picture", help="Avatar URL, or a local file to upload.")
@click.option("--banner", help="Banner URL, or a local file to upload.")
@click.option("--nip05", help="NIP-05 identifier.")
@click.option("--lud16", help="Lightning address.")
@click.pass_context
def profile(
    ctx: click.Context,
    name: str | None,
    about: str | None,
    picture: str | None,
    banner: str | None,
    nip05: str | None,
    lud16: str | None,
) -> None:
    """Show your profile, or update it with any of the options.

    Only the given fields change; the rest of the published profile is kept.
    """
    updates = ProfileMetadata(
        name=name, about=about, picture=picture, banner=banner, nip05=nip05, lud16=lud16
    )

    if not updates.is_empty:

        async def update(client: BlupClient) -> ProfileMetadata:
            return await client.update_profile(updates)

        merged = run(ctx, update)
        click.echo("Profile updated")
        echo_profile(merged)
        return

    async def show(client: BlupClient) -> ProfileMetadata | None:
        npub = client.npub()
        click.echo(f"Account: {client.active_account()}")
        click.echo(f"npub:    {npub}")
        click.echo("Fetching profile from relays...", err=True)
        return await client.profile()

    current = run(ctx, show)
    if current is None:
        click.echo("No profile found on relays.")
        click.echo("Run 'blup profile --name \"Your Name\"' to create one.")
        return

    click.echo("")
    echo_profile(current)
    if current.picture:
        display_image(current.picture)
