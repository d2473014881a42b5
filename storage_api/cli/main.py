"""Main CLI entry point for storage-api commands."""

import click

from storage_api import __version__
from storage_api.cli.commands import server, storage
from storage_api.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="storage-api")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Storage API CLI - run the HTTP service or call storage directly.

    \b
    Commands:
      serve      Run the HTTP server
      storage    Bucket and object operations

    \b
    Quick Start:
      storage-api serve
      storage-api storage info
      storage-api storage create-bucket reports
      storage-api storage download-link reports report.txt
    """
    ctx.ensure_object(dict)


cli.add_command(server.serve)
cli.add_command(storage.storage)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
