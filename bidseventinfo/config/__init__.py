"""
Configuration package façade.

Exports the small, stable surface that external callers rely on:

* :func:`load_settings` – Locate, merge and validate *eventinfo.yaml*.
* :class:`EventInfoSettings` – Pydantic model representing the settings.
"""

from .loader import load_settings  # noqa: F401
from .schema import EventInfoSettings, FieldDefaults  # noqa: F401

__all__: list[str] = ["load_settings", "EventInfoSettings", "FieldDefaults"]
