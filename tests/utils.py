"""Test helpers for bidseventinfo modules."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pandas as pd

from bidseventinfo.models import EventDataset

CLI = [sys.executable, "-m", "bidseventinfo.cli"]


def eeg_events(n: int = 3) -> list[dict]:
    """Return EEGLAB-style event records with ``usertags``.

    Args:
        n: Number of events.

    Returns:
        Records with ``type``, ``latency``, ``duration`` and ``usertags``.
    """
    return [
        {
            "type": i % 2 + 1,
            "latency": 100 * (i + 1),
            "duration": 0,
            "usertags": "Sensory-event",
        }
        for i in range(n)
    ]


def make_dataset(name: str = "ds1", events: list[dict] | None = None) -> EventDataset:
    """Create an in-memory dataset, defaulting to :func:`eeg_events`."""
    return EventDataset(name=name, events=eeg_events() if events is None else events)


def write_events_tsv(path: Path, columns: dict[str, list]) -> Path:
    """Write *columns* as a tab-separated events file and return *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(columns).to_csv(path, sep="\t", index=False)
    return path


def run_cli(*args: str, cwd: Path) -> subprocess.CompletedProcess:
    """Run ``python -m bidseventinfo.cli`` with *args* inside *cwd*."""
    return subprocess.run(
        CLI + list(args),
        capture_output=True,
        text=True,
        cwd=cwd,
        env=os.environ.copy(),
    )
