"""CLI command modules."""

from storage_api.cli.commands import server, storage

__all__ = [
    "server",
    "storage",
]
