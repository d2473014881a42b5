"""Console output helpers for CLI commands.

Status lines go through ``click.secho`` so colours are dropped automatically
when output is not a terminal. Errors go to stderr.
"""

from typing import Any

import click


def success(message: str) -> None:
    click.secho(f"✓ {message}", fg="green")


def error(message: str) -> None:
    click.secho(f"✗ {message}", fg="red", err=True)


def warning(message: str) -> None:
    click.secho(f"⚠ {message}", fg="yellow")


def info(message: str) -> None:
    click.secho(f"ℹ {message}", fg="blue")


def banner(title: str, width: int = 60) -> None:
    """Print ``title`` between two rules."""
    click.echo("=" * width)
    click.secho(title, fg="cyan", bold=True)
    click.echo("=" * width)


def field(label: str, value: Any) -> None:
    """Print one ``label: value`` line of a settings listing."""
    click.echo(f"{click.style(label + ':', bold=True)} {value}")
