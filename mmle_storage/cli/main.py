"""Main CLI entry point for mmle-storage."""

import click


def get_version() -> str:
    """Get the current version."""
    try:
        from mmle_storage import __version__

        return __version__
    except ImportError:
        return "unknown"


@click.group()
@click.version_option(version=get_version(), prog_name="mmle-storage")
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False),
    default="mmle_storage.db",
    show_default=True,
    help="SQLite file backing the local store.",
)
@click.option(
    "--compress/--no-compress",
    default=False,
    show_default=True,
    help="Compress values with zlib before storing them.",
)
@click.pass_context
def main(ctx: click.Context, db_path: str, compress: bool) -> None:
    """mmle-storage - key-value storage with cookie fallback and expiry.

    \b
    Examples:
        mmle-storage set profile '{"name": "pipi"}'   Store a JSON value
        mmle-storage set token abc --ttl 3h            Store a value for 3 hours
        mmle-storage get profile                       Read a value
        mmle-storage keys                              List stored keys
        mmle-storage clear --confirm                   Remove every key
    """
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db_path
    ctx.obj["compress"] = compress


# Import subcommands - these register themselves with the main group
def _register_commands() -> None:
    """Register all subcommands."""
    from . import commands  # noqa: F401


_register_commands()

if __name__ == "__main__":
    main()
