"""
bidseventinfo package initialisation.

1. **Expose the version string** resolved from the installed distribution
   metadata.
2. **Re-export the public entry points** so call-sites can simply do::

       from bidseventinfo import EventInfoSession, EventRegistry

Module attributes
-----------------
__version__ : str
    Version derived from the installed wheel.
"""

from importlib.metadata import PackageNotFoundError, version

# --------------------------------------------------------------------------- #
# Version resolution
# --------------------------------------------------------------------------- #
try:
    __version__: str = version("bidseventinfo")
except PackageNotFoundError:
    # Source tree without an installed wheel.
    __version__ = "0.0.0"

# --------------------------------------------------------------------------- #
# Public re-exports
# --------------------------------------------------------------------------- #
from .config import load_settings  # noqa: E402
from .levels import check_format, collect_unique_values  # noqa: E402
from .models import BIDSField, BidsEventInfo, EventDataset, FieldAnnotation  # noqa: E402
from .registry import EventRegistry  # noqa: E402
from .session import EventInfoSession, apply_defaults  # noqa: E402

__all__: list[str] = [
    "__version__",
    "BIDSField",
    "BidsEventInfo",
    "EventDataset",
    "EventInfoSession",
    "EventRegistry",
    "FieldAnnotation",
    "apply_defaults",
    "check_format",
    "collect_unique_values",
    "load_settings",
]
