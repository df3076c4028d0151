"""
Public façade for the *utils* package.

Anything imported here becomes part of the stable public API.
"""

from __future__ import annotations

from .errors import (
    DuplicateMappingError,
    EventInfoError,
    InconsistentSchemaError,
    MissingFieldError,
    SessionClosedError,
    UnknownFieldError,
    UnmappedFieldError,
    UnsupportedLevelEditError,
)
from .merge import deep_update

__all__: list[str] = [
    "DuplicateMappingError",
    "EventInfoError",
    "InconsistentSchemaError",
    "MissingFieldError",
    "SessionClosedError",
    "UnknownFieldError",
    "UnmappedFieldError",
    "UnsupportedLevelEditError",
    "deep_update",
]
