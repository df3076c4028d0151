"""Read events tables and write event-info JSON files.

Layout next to each ``*_events.tsv``:

* ``<stem>_eventinfo.json`` – description dictionary, field-mapping table and
  edit history, reloaded when the next session opens;
* ``<stem>.json`` – BIDS sidecar holding the description dictionary.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import pandas as pd

from bidseventinfo.models import BidsEventInfo, EventDataset

log = logging.getLogger(__name__)

__all__ = [
    "eventinfo_path",
    "load_dataset",
    "read_events",
    "write_eventinfo",
    "write_events_json",
]


def _read_table(path: Path) -> pd.DataFrame:
    """Load the tab-separated events file *path*."""
    return pd.read_csv(path, sep="\t")


def read_events(path: Path) -> list[dict[str, Any]]:
    """Return the rows of *path* as records; empty cells become ``None``."""
    df = _read_table(path)
    df = df.astype(object).where(df.notna(), None)
    return df.to_dict(orient="records")


def eventinfo_path(tsv: Path) -> Path:
    """Return the annotation file that belongs to *tsv*."""
    return tsv.with_name(f"{tsv.stem}_eventinfo.json")


def load_dataset(tsv: Path) -> EventDataset:
    """Build an :class:`EventDataset` from *tsv* and its annotation file.

    Args:
        tsv: Path to an events TSV.

    Returns:
        Dataset whose ``bids`` and ``history`` come from
        ``<stem>_eventinfo.json`` when that file exists.

    Raises:
        RuntimeError: When the annotation file cannot be parsed.
    """
    tsv = Path(tsv)
    dataset = EventDataset(name=tsv.name, path=tsv, events=read_events(tsv))
    info_path = eventinfo_path(tsv)
    if info_path.exists():
        try:
            raw = json.loads(info_path.read_text())
            dataset.bids = BidsEventInfo(
                descriptions=raw.get("descriptions", {}),
                mapping=raw.get("mapping", []),
            )
        except Exception as exc:  # json.JSONDecodeError or pydantic errors
            raise RuntimeError(f"Could not read {info_path}: {exc}") from exc
        dataset.history = list(raw.get("history", []))
        log.debug("[eventinfo] loaded %s", info_path.name)
    return dataset


def write_eventinfo(dataset: EventDataset) -> Path:
    """Write the annotation of *dataset* next to its events file.

    Raises:
        ValueError: If the dataset has no path or no annotation.
    """
    if dataset.path is None or dataset.bids is None:
        raise ValueError(f"{dataset.name} has no events file or no BIDS event info")
    out = eventinfo_path(dataset.path)
    payload = {
        "descriptions": dataset.bids.descriptions,
        "mapping": [list(row) for row in dataset.bids.mapping],
        "history": dataset.history,
    }
    out.write_text(json.dumps(payload, indent=2, ensure_ascii=False))
    dataset.saved = True
    log.info("[eventinfo] wrote %s", out.name)
    return out


def write_events_json(
    tsv: Path,
    descriptions: Mapping[str, Any],
    overwrite: bool = False,
    root: Path | None = None,
) -> bool:
    """Write the ``*.json`` sidecar next to *tsv* respecting *overwrite*.

    Args:
        tsv: Source events file.
        descriptions: Description dictionary to write.
        overwrite: Whether to overwrite an existing JSON file.
        root: Base path used when reporting the saved file.

    Returns:
        ``True`` if a new file was written, ``False`` otherwise.
    """
    json_path = tsv.with_suffix(".json")
    if json_path.exists() and not overwrite:
        log.info(
            "[events-json] %s exists – skipped",
            json_path.relative_to(root or json_path.parent),
        )
        return False
    json_path.write_text(json.dumps(dict(descriptions), indent=2, ensure_ascii=False))
    log.info(
        "[events-json] wrote %s",
        json_path.relative_to(root or json_path.parent),
    )
    return True
