"""Dictionary helpers shared by the settings loader and the registry."""

from __future__ import annotations

from typing import Any, Mapping

__all__ = ["deep_update"]


def deep_update(dst: dict, src: Mapping[str, Any]) -> dict:
    """Recursively merge *src* into *dst* and return *dst*."""
    for key, val in src.items():
        if isinstance(val, Mapping) and isinstance(dst.get(key), dict):
            dst[key] = deep_update(dst[key], val)
        else:
            dst[key] = val
    return dst
