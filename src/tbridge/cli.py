"""tbridge CLI entrypoint."""

from __future__ import annotations

import click

from tbridge import __version__


@click.group()
@click.version_option(version=__version__, prog_name="tbridge")
def main() -> None:
    """tbridge — talk to Claude through provider-agnostic transcripts."""


# Register subcommands
from tbridge.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
