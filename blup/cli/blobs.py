"""Blob commands for the blup CLI.

Commands:
- upload: Upload a file to the preferred server
- mirror: Copy a URL to the preferred server
- list: List your blobs
- delete: Delete a blob by hash
"""

from __future__ import annotations

from pathlib import Path

import click

from blup.cli.runtime import echo_blob, echo_json, run
from blup.client import BlupClient
from blup.models.blob import BlobDescriptor, DeleteResult


@click.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.pass_context
def upload(ctx: click.Context, path: Path) -> None:
    """Upload a file to your preferred server."""

    async def action(client: BlupClient) -> BlobDescriptor:
        return await client.upload_file(path)

    echo_blob(ctx, run(ctx, action))


@click.command()
@click.argument("url")
@click.pass_context
def mirror(ctx: click.Context, url: str) -> None:
    """Mirror a URL to your preferred server.

    The server is asked to fetch the URL itself; if it cannot, the blob is
    downloaded and uploaded again.
    """

    async def action(client: BlupClient) -> BlobDescriptor:
        return await client.mirror(url)

    echo_blob(ctx, run(ctx, action))


@click.command("list")
@click.pass_context
def list_blobs(ctx: click.Context) -> None:
    """List your uploaded blobs."""

    async def action(client: BlupClient) -> list[BlobDescriptor]:
        return await client.list_blobs()

    echo_json([blob.to_dict() for blob in run(ctx, action)])


@click.command()
@click.argument("sha256")
@click.pass_context
def delete(ctx: click.Context, sha256: str) -> None:
    """Delete a blob by hash."""

    async def action(client: BlupClient) -> DeleteResult:
        return await client.delete_blob(sha256)

    result = run(ctx, action)
    if result.confirmed:
        click.echo(f"Deleted {result.sha256}")
    else:
        click.echo(f"Delete request sent for {result.sha256}")
