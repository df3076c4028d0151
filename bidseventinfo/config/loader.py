"""
YAML settings loader.

This helper locates, reads and validates *eventinfo.yaml* before returning a
:class:`bidseventinfo.config.schema.EventInfoSettings` instance.

Search precedence (first match wins)
1. An explicit path argument (``--config`` on the CLI).
2. ``<dataset>/code/config/eventinfo.yaml`` – project-local override.
3. The packaged default shipped inside the wheel.

Project-local and explicit files only need to list the keys they change;
they are merged over the packaged default before validation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from importlib.resources import as_file, files

from bidseventinfo.utils.merge import deep_update

from .schema import EventInfoSettings

# --------------------------------------------------------------------------- #
# Wheel-internal fallback (works even from a zipped wheel)                    #
# --------------------------------------------------------------------------- #
try:
    _DEFAULT_SETTINGS = files("bidseventinfo.resources") / "default_eventinfo.yaml"
except ModuleNotFoundError:
    _DEFAULT_SETTINGS = (
        Path(__file__).resolve().parent.parent / "resources" / "default_eventinfo.yaml"
    )

_FNAME = "eventinfo.yaml"

# --------------------------------------------------------------------------- #
# Helper functions                                                            #
# --------------------------------------------------------------------------- #


def _dataset_local(root: Optional[str | Path]) -> Optional[Path]:
    """Return ``<root>/code/config/eventinfo.yaml`` or *None* without a root."""
    if root is None:
        return None
    return Path(root).expanduser().resolve() / "code" / "config" / _FNAME


def _load_yaml(path: Path) -> dict:
    """Read a YAML file, returning an empty dict for empty documents."""
    return yaml.safe_load(path.read_text()) or {}


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #
def load_settings(
    path: Optional[str | Path] = None,
    *,
    dataset_root: Optional[str | Path] = None,
) -> EventInfoSettings:
    """Return validated :class:`EventInfoSettings`.

    Args:
        path: Explicit settings YAML. ``None`` triggers the search sequence
            described in the module doc-string.
        dataset_root: Dataset root used to look for a project-local override.

    Returns:
        Settings ready for use by the registry and the CLI.

    Raises:
        FileNotFoundError: When *path* is given but does not exist.
        RuntimeError: When the merged YAML fails validation.
    """
    with as_file(_DEFAULT_SETTINGS) as p:
        merged = _load_yaml(Path(p))

    override: Optional[Path] = None
    if path is not None:
        override = Path(path).expanduser().resolve()
        if not override.exists():
            raise FileNotFoundError(f"Settings file not found: {override}")
    else:
        local = _dataset_local(dataset_root)
        if local is not None and local.exists():
            override = local

    try:
        if override is not None:
            merged = deep_update(merged, _load_yaml(override))
        return EventInfoSettings(**merged)
    except Exception as exc:  # pydantic.ValidationError or YAML issues
        raise RuntimeError(f"Invalid configuration – {exc}") from exc
