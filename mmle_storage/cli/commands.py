"""Key-value commands backed by a SQLite local store."""

from __future__ import annotations

import asyncio
import json
import sys
from datetime import datetime, timezone
from typing import Any

import click

from ..codecs import ZlibCompressor
from ..config import StorageConfig
from ..exceptions import MmleStorageError
from ..expiry import ExpiringEntry
from ..store import Storage
from ..substrates.sqlite import SQLiteLocalStore
from ._utils import (
    console,
    parse_duration,
    parse_value,
    print_error,
    print_stats,
    print_success,
    print_table,
    print_warning,
    truncate,
)
from .main import main


def get_storage(ctx: click.Context) -> Storage:
    """Build a Storage over the SQLite file selected on the command line."""
    config = StorageConfig.from_env()
    local_store = SQLiteLocalStore(ctx.obj["db_path"], quota=config.local_quota)
    compressor = ZlibCompressor() if ctx.obj["compress"] else None
    return Storage(local_store=local_store, compressor=compressor, config=config)


def _render(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


@main.command("set")
@click.argument("key", type=str)
@click.argument("value", type=str)
@click.option(
    "--ttl", "ttl", type=str, help="Expire the value after a duration (e.g., 30s, 3h, 7d)."
)
@click.pass_context
def set_value(ctx: click.Context, key: str, value: str, ttl: str | None) -> None:
    """Store VALUE under KEY.

    VALUE is parsed as JSON when possible and stored as plain text otherwise.

    \b
    Examples:
        mmle-storage set count 3
        mmle-storage set profile '{"name": "pipi"}'
        mmle-storage set token abc --ttl 3h
    """
    try:
        storage = get_storage(ctx)
        parsed = parse_value(value)
        if ttl:
            expire_at = datetime.now(timezone.utc) + parse_duration(ttl)
            asyncio.run(storage.set_with_expire(key, parsed, expire_at))
            print_success(f"Stored '{key}' until {expire_at.isoformat(timespec='seconds')}")
        else:
            asyncio.run(storage.set(key, parsed))
            print_success(f"Stored '{key}'")
    except click.BadParameter as e:
        print_error(str(e))
        sys.exit(1)
    except MmleStorageError as e:
        print_error(f"Failed to store '{key}': {e}")
        sys.exit(1)


@main.command("get")
@click.argument("key", type=str)
@click.pass_context
def get_value(ctx: click.Context, key: str) -> None:
    """Print the value stored under KEY.

    Values stored with --ttl are unwrapped, and purged if they have expired.
    """
    try:
        storage = get_storage(ctx)
        stored = asyncio.run(storage.get(key))
        if ExpiringEntry.from_stored(stored) is not None:
            stored = asyncio.run(storage.get_with_expire(key))
    except MmleStorageError as e:
        print_error(f"Failed to read '{key}': {e}")
        sys.exit(1)

    if stored is None:
        print_warning(f"Key '{key}' not found")
        sys.exit(1)

    if isinstance(stored, str):
        click.echo(stored)
    else:
        console.print_json(json.dumps(stored, ensure_ascii=False))


@main.command("keys")
@click.pass_context
def list_keys(ctx: click.Context) -> None:
    """List stored keys with a preview of their values."""
    try:
        storage = get_storage(ctx)

        async def collect() -> list[tuple[str, Any]]:
            return [(key, await storage.get(key)) for key in sorted(await storage.keys())]

        entries = asyncio.run(collect())
    except MmleStorageError as e:
        print_error(f"Failed to list keys: {e}")
        sys.exit(1)

    if not entries:
        click.echo("No keys stored.")
        return

    rows: list[list[str]] = []
    for key, value in entries:
        entry = ExpiringEntry.from_stored(value)
        if entry is not None:
            expires = datetime.fromtimestamp(entry.expire_at / 1000, tz=timezone.utc)
            expires_label = expires.isoformat(timespec="seconds")
            rows.append([key, truncate(_render(entry.value)), expires_label])
        else:
            rows.append([key, truncate(_render(value)), "-"])

    print_table(["KEY", "VALUE", "EXPIRES"], rows, title=f"Keys ({len(rows)})")


@main.command("rm")
@click.argument("key", type=str)
@click.pass_context
def remove_value(ctx: click.Context, key: str) -> None:
    """Remove KEY. Removing a missing key is not an error."""
    try:
        asyncio.run(get_storage(ctx).remove(key))
    except MmleStorageError as e:
        print_error(f"Failed to remove '{key}': {e}")
        sys.exit(1)
    print_success(f"Removed '{key}'")


@main.command("clear")
@click.option(
    "--confirm",
    "confirm_flag",
    is_flag=True,
    help="Confirm that you want to remove ALL keys.",
)
@click.pass_context
def clear_values(ctx: click.Context, confirm_flag: bool) -> None:
    """Remove every key stored under the namespace prefix.

    Entries outside the prefix are left alone. Requires --confirm.
    """
    if not confirm_flag:
        print_error("This removes ALL stored keys. Re-run with --confirm to proceed.")
        sys.exit(1)

    try:
        storage = get_storage(ctx)
        count = len(asyncio.run(storage.keys()))
        asyncio.run(storage.remove_all())
    except MmleStorageError as e:
        print_error(f"Failed to clear storage: {e}")
        sys.exit(1)
    print_success(f"Removed {count} key(s)")


@main.command("info")
@click.pass_context
def show_info(ctx: click.Context) -> None:
    """Show the selected backend, codec and substrate statistics."""
    try:
        stats = get_storage(ctx).get_stats()
    except MmleStorageError as e:
        print_error(f"Failed to read storage info: {e}")
        sys.exit(1)
    print_stats(stats, title="mmle-storage")
