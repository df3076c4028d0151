"""CLI helper listing the distinct values of one event field.

Prints every value found across the given events files next to the key under
which its level description is stored, so ``edit --level`` specs can be
written without guessing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

import click
import structlog

from bidseventinfo.config import EventInfoSettings
from bidseventinfo.io import load_dataset
from bidseventinfo.levels import check_format, collect_unique_values
from bidseventinfo.utils.display import echo_banner, echo_success, echo_warning
from bidseventinfo.utils.errors import MissingFieldError

log = structlog.get_logger()


@click.command(
    name="levels",
    context_settings=dict(
        help_option_names=["-h", "--help"], show_default=True, max_content_width=120
    ),
    help="List the distinct values of an event field across events TSV files.",
)
@click.argument(
    "tsv_paths",
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    nargs=-1,
    required=True,
)
@click.option("--field", "native_field", required=True, help="Event field to scan.")
@click.pass_obj
def cli(ctx_obj, tsv_paths: Tuple[Path, ...], native_field: str) -> None:
    """Print the distinct values of *native_field* and their level keys.

    Raises:
        click.ClickException: When a file cannot be read or lacks
            *native_field*.
    """
    settings: EventInfoSettings = ctx_obj["settings"]
    echo_banner(f"levels of {native_field}")

    try:
        datasets = [load_dataset(p) for p in tsv_paths]
    except (RuntimeError, OSError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    try:
        values = collect_unique_values(datasets, native_field)
    except MissingFieldError as exc:
        raise click.ClickException(str(exc)) from exc

    if len(values) > settings.level_threshold:
        log.warning(
            "many levels", field=native_field, n=len(values), threshold=settings.level_threshold
        )
        echo_warning(
            f"There are more than {settings.level_threshold} unique levels for field "
            f"{native_field}."
        )
    for value in values:
        click.echo(f"  {value}\t{check_format(value)}")
    echo_success(f"{len(values)} distinct value(s).")


__all__ = ["cli"]
