"""CLI utilities for running async operations and formatting output."""

from storage_api.cli.utils.async_runner import coro
from storage_api.cli.utils.formatters import banner, error, field, info, success, warning

__all__ = [
    "banner",
    "coro",
    "error",
    "field",
    "info",
    "success",
    "warning",
]
