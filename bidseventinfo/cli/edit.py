"""
CLI front-end for :class:`bidseventinfo.session.EventInfoSession`.

The command loads one or more ``*_events.tsv`` files, opens an edit session
(resuming from ``<stem>_eventinfo.json`` when present), applies the scripted
edits, commits, and writes the annotation back next to each TSV.

Without any edit flag the command commits the starting annotation, which is
how defaults are generated for a fresh dataset.

Notes
------------
* Edits run in a fixed order: ``--map``, then ``--long-name`` /
  ``--description`` / ``--term-url``, then ``--units``, then ``--level``.
* A rejected edit (duplicate mapping, unmapped field, level edit on a
  continuous field) is reported and skipped; the remaining edits still run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Tuple

import click
import structlog

from bidseventinfo.config import EventInfoSettings
from bidseventinfo.io import load_dataset, write_eventinfo, write_events_json
from bidseventinfo.session import EventInfoSession
from bidseventinfo.utils.display import (
    echo_banner,
    echo_column,
    echo_field,
    echo_success,
    echo_warning,
)
from bidseventinfo.utils.errors import EventInfoError

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Spec parsers
# ---------------------------------------------------------------------------
def _parse_colval_specs(specs: Tuple[str, ...], flag: str) -> list[tuple[str, str]]:
    """Return ``(field, value)`` pairs parsed from ``field=value`` substrings."""
    pairs: list[tuple[str, str]] = []
    for raw in specs:
        if "=" not in raw:
            raise click.ClickException(f"{flag} bad spec '{raw}'")
        col, val = (s.strip() for s in raw.split("=", 1))
        if not col:
            raise click.ClickException(f"{flag} bad spec '{raw}'")
        pairs.append((col, val))
    return pairs


def _parse_levels_specs(specs: Tuple[str, ...]) -> list[tuple[str, str, str]]:
    """Convert ``field=val:desc,...`` substrings into ``(field, val, desc)``."""
    rows: list[tuple[str, str, str]] = []
    for raw in specs:
        if "=" not in raw:
            raise click.ClickException(f"--level bad spec '{raw}'")
        col, rest = (s.strip() for s in raw.split("=", 1))
        if not col or not rest:
            raise click.ClickException(f"--level bad spec '{raw}'")
        found = False
        for chunk in rest.split(","):
            if not chunk.strip():
                continue
            if ":" not in chunk:
                raise click.ClickException(
                    f"--level bad val:desc pair in '{raw}': '{chunk}'"
                )
            val, desc = (s.strip() for s in chunk.split(":", 1))
            if not val:
                raise click.ClickException(
                    f"--level bad val:desc pair in '{raw}': '{chunk}'"
                )
            rows.append((col, val, desc))
            found = True
        if not found:
            raise click.ClickException(f"--level no val:desc pairs in '{raw}'")
    return rows


def _parse_units_specs(
    specs: Tuple[str, ...], settings: EventInfoSettings
) -> list[tuple[str, str, str]]:
    """Convert ``field=[prefix:]name`` substrings into ``(field, prefix, name)``.

    Prefix and name must come from the settings vocabulary; either may be
    left empty.
    """
    rows: list[tuple[str, str, str]] = []
    for col, val in _parse_colval_specs(specs, "--units"):
        prefix, _, name = val.rpartition(":")
        prefix, name = prefix.strip(), name.strip()
        if prefix and prefix not in settings.unit_prefixes:
            raise click.ClickException(f"--units unknown unit prefix '{prefix}'")
        if name and name not in settings.unit_names:
            raise click.ClickException(f"--units unknown unit name '{name}'")
        rows.append((col, prefix, name))
    return rows


def _attempt(action: Callable[[], object], what: str) -> bool:
    """Run one edit command; report and swallow rejections."""
    try:
        action()
    except EventInfoError as exc:
        log.warning("edit rejected", edit=what, reason=str(exc))
        echo_warning(f"{what}: {exc}")
        return False
    return True


# ---------------------------------------------------------------------------
# Click command definition
# ---------------------------------------------------------------------------
@click.command(
    name="edit",
    context_settings=dict(
        help_option_names=["-h", "--help"], show_default=True, max_content_width=120
    ),
    help=(
        "Create or update BIDS event info for events TSV files. With the global "
        "-v flag the sidecar column definitions are listed before the field table."
    ),
)
@click.argument(
    "tsv_paths",
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    nargs=-1,
    required=True,
)
@click.option(
    "--start-fresh",
    is_flag=True,
    help="Ignore saved event info and start from the defaults.",
)
@click.option(
    "--map",
    "map_specs",
    multiple=True,
    metavar="bids=native",
    help="Map a BIDS field to an event field; empty native unmaps (repeatable).",
)
@click.option("--long-name", "long_names", multiple=True, metavar="bids=text")
@click.option("--description", "descriptions", multiple=True, metavar="bids=text")
@click.option("--term-url", "term_urls", multiple=True, metavar="bids=url")
@click.option(
    "--units",
    "units_specs",
    multiple=True,
    metavar="bids=[prefix:]name",
    help="Measurement units, e.g. 'response_time=milli:second' (repeatable).",
)
@click.option(
    "--level",
    "level_specs",
    multiple=True,
    metavar="bids=val:desc[,val:desc...]",
    help="Describe levels of a categorical field (repeatable).",
)
@click.option(
    "--events-json",
    is_flag=True,
    help="Also write the BIDS *_events.json side-car next to each TSV.",
)
@click.option("--overwrite", is_flag=True, help="Overwrite existing side-cars.")
@click.pass_obj
def cli(
    ctx_obj,
    tsv_paths: Tuple[Path, ...],
    start_fresh: bool,
    map_specs: Tuple[str, ...],
    long_names: Tuple[str, ...],
    descriptions: Tuple[str, ...],
    term_urls: Tuple[str, ...],
    units_specs: Tuple[str, ...],
    level_specs: Tuple[str, ...],
    events_json: bool,
    overwrite: bool,
) -> None:
    """Annotate the events of *tsv_paths* and save the result.

    Args:
        ctx_obj: Click context populated in ``bidseventinfo.cli.main``.
        tsv_paths: Events files edited together.
        start_fresh: Discard saved event info before editing.
        map_specs: ``bids=native`` mappings.
        long_names / descriptions / term_urls: ``bids=text`` edits.
        units_specs: ``bids=[prefix:]name`` unit edits.
        level_specs: ``bids=val:desc`` level descriptions.
        events_json: Write BIDS side-cars too.
        overwrite: Replace existing side-cars.

    Raises:
        click.ClickException: When inputs cannot be read or specs are malformed.
    """
    settings: EventInfoSettings = ctx_obj["settings"]

    maps = _parse_colval_specs(map_specs, "--map")
    texts = [
        (col, attr, val)
        for attr, specs, flag in (
            ("long_name", long_names, "--long-name"),
            ("description", descriptions, "--description"),
            ("term_url", term_urls, "--term-url"),
        )
        for col, val in _parse_colval_specs(specs, flag)
    ]
    units = _parse_units_specs(units_specs, settings)
    levels = _parse_levels_specs(level_specs)

    echo_banner("BIDS event info")

    try:
        datasets = [load_dataset(p) for p in tsv_paths]
        session = EventInfoSession.open(datasets, settings=settings)
    except (RuntimeError, OSError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    if start_fresh:
        session.start_fresh()
    registry = session.registry

    rejected = 0
    for col, native in maps:
        rejected += not _attempt(
            lambda: registry.set_native_mapping(col, native), f"--map {col}={native}"
        )
    for col, attr, val in texts:
        rejected += not _attempt(
            lambda: registry.set_text(col, attr, val), f"--{attr.replace('_', '-')} {col}"
        )
    for col, prefix, name in units:
        rejected += not _attempt(
            lambda: registry.set_units(col, prefix, name), f"--units {col}"
        )
    for col, val, desc in levels:
        rejected += not _attempt(
            lambda: registry.set_level_description(col, val, desc), f"--level {col}={val}"
        )

    if ctx_obj.get("verbose"):
        for key, text in settings.column_definitions.items():
            echo_column(key, text)
    for field, entry in registry.items():
        echo_field(field.value, entry.native_field, registry.levels_summary(field))
    mapped = [f.value for f in registry.mapped_fields()]
    echo_success(f"{len(mapped)} mapped field(s): {', '.join(mapped)}")

    info = session.commit()

    written = 0
    for ds in datasets:
        write_eventinfo(ds)
        if events_json and write_events_json(
            ds.path, info.descriptions, overwrite=overwrite
        ):
            written += 1

    log.info("event info committed", datasets=len(datasets), rejected=rejected)
    echo_success(f"{len(datasets)} event info file(s) written.")
    if events_json:
        echo_success(f"{written} JSON side-car(s) written.")


__all__ = ["cli"]
