"""Utility functions to print formatted CLI messages."""

from __future__ import annotations

import click

__all__ = ["echo_banner", "echo_column", "echo_field", "echo_success", "echo_warning"]


def echo_banner(text: str) -> None:
    """Print a colourful banner announcing a processing step.

    Args:
        text: Banner text.
    """
    click.secho(f"\n=== {text} ===", fg="cyan")


def echo_field(name: str, native: str, levels: str) -> None:
    """Echo one row of the BIDS field table.

    Args:
        name: BIDS field.
        native: Mapped native field (empty when unmapped).
        levels: Content of the "Levels" column.
    """
    click.echo(f"  • {name:<14} ← {native or '-':<26} levels: {levels}")


def echo_success(text: str) -> None:
    """Echo a green success message prefixed with a tick."""
    click.secho(f"✓ {text}", fg="green")


def echo_warning(text: str) -> None:
    """Echo a yellow warning line."""
    click.secho(f"! {text}", fg="yellow")


def echo_column(key: str, text: str) -> None:
    """Echo the help text of one sidecar column (dimmed)."""
    click.secho(f"  {key}: {text}", dim=True)
