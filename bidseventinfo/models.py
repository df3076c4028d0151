"""
Domain-level data models shared across the registry, session, I/O and CLI
layers.

The module provides:

* **`BIDSField`** – the closed vocabulary of BIDS event columns that can be
  annotated. Every lookup goes through :meth:`BIDSField.parse` so misspelt
  names fail early.
* **`FieldAnnotation`** – the mutable per-field record held by the registry.
* **`BidsEventInfo`** – the pair of export artifacts (description dictionary
  and field-mapping table) attached to a dataset.
* **`EventDataset`** – the minimal view of a host dataset: its event records,
  attached BIDS info, saved flag and edit history.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from bidseventinfo.utils.errors import UnknownFieldError

# --------------------------------------------------------------------------- #
# logging
# --------------------------------------------------------------------------- #
log = logging.getLogger(__name__)

# --------------------------------------------------------------------------- #
# 1 – BIDS field vocabulary
# --------------------------------------------------------------------------- #


class BIDSField(str, Enum):
    """BIDS ``*_events.tsv`` columns supported by the editor (canonical order)."""

    ONSET = "onset"
    DURATION = "duration"
    TRIAL_TYPE = "trial_type"
    VALUE = "value"
    STIM_FILE = "stim_file"
    SAMPLE = "sample"
    HED = "HED"
    RESPONSE_TIME = "response_time"

    @classmethod
    def parse(cls, value: "BIDSField | str") -> "BIDSField":
        """Return the enum member for *value*.

        Args:
            value: Member or its string value (e.g. ``"trial_type"``).

        Returns:
            The matching :class:`BIDSField`.

        Raises:
            UnknownFieldError: If *value* is not a recognised BIDS field.
        """
        try:
            return cls(value)
        except ValueError:
            raise UnknownFieldError(
                f"'{value}' is not a BIDS event field; expected one of "
                + ", ".join(f.value for f in cls)
            ) from None

    def __str__(self) -> str:
        return self.value


# Continuous fields and HED never carry level descriptions.
NO_LEVEL_FIELDS = frozenset(
    {BIDSField.ONSET, BIDSField.SAMPLE, BIDSField.DURATION, BIDSField.HED}
)

# Synthetic native fields derived from the event latency.
ONSET_NATIVE_FIELD = "latency (converted to s)"
SAMPLE_NATIVE_FIELD = "latency (sample)"

NOT_APPLICABLE = "n/a"
UNSPECIFIED_LEVELS = "Click to specify below"

HISTORY_COMMAND = "[dataset, descDict, mapTable] = editEventInfo(dataset)"

# BIDS sidecar keys in the order they are exported.
SIDECAR_KEYS = ("LongName", "Description", "Units", "Levels", "TermURL")

# --------------------------------------------------------------------------- #
# 2 – Registry entry
# --------------------------------------------------------------------------- #


class FieldAnnotation(BaseModel, validate_assignment=True):
    """Annotation of one BIDS field.

    Attributes
    ----------
    native_field
        Column of the source event table, ``""`` when unmapped.
    long_name / description / term_url
        Free text, may be empty.
    units
        Unit prefix concatenated with the unit name (e.g. ``"millisecond"``).
    levels
        Canonical categorical value → description.
    """

    native_field: str = ""
    long_name: str = ""
    description: str = ""
    units: str = ""
    term_url: str = ""
    levels: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_mapped(self) -> bool:
        """``True`` when a native field has been chosen."""
        return bool(self.native_field)

    @classmethod
    def from_sidecar(cls, native_field: str, info: Any) -> "FieldAnnotation":
        """Build an entry from a description-dictionary item.

        Missing keys load as empty values. A ``Levels`` value that is not a
        mapping (e.g. the ``"n/a"`` sentinel) loads as no levels.
        """
        info = info if isinstance(info, dict) else {}
        levels = info.get("Levels")
        if not isinstance(levels, dict):
            levels = {}
        return cls(
            native_field=native_field,
            long_name=info.get("LongName") or "",
            description=info.get("Description") or "",
            units=info.get("Units") or "",
            term_url=info.get("TermURL") or "",
            levels={str(k): str(v) for k, v in levels.items()},
        )

    def to_sidecar(self) -> Dict[str, Any]:
        """Return the non-empty attributes keyed with BIDS sidecar names."""
        values = {
            "LongName": self.long_name,
            "Description": self.description,
            "Units": self.units,
            "Levels": dict(self.levels) if self.levels else None,
            "TermURL": self.term_url,
        }
        return {k: values[k] for k in SIDECAR_KEYS if values[k]}


# --------------------------------------------------------------------------- #
# 3 – Export artifacts & host dataset
# --------------------------------------------------------------------------- #


class BidsEventInfo(BaseModel):
    """Description dictionary plus field-mapping table.

    Attributes
    ----------
    descriptions
        BIDS field name → ``{LongName, Description, Units, Levels, TermURL}``.
    mapping
        Ordered ``(bids_field, native_field)`` rows.
    """

    descriptions: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    mapping: List[Tuple[str, str]] = Field(default_factory=list)

    def native_for(self, bids_field: str) -> Optional[str]:
        """Return the native field mapped to *bids_field* or ``None``."""
        for bids, native in self.mapping:
            if bids == bids_field:
                return native
        return None


class EventDataset(BaseModel):
    """Host dataset as seen by the editor.

    Attributes
    ----------
    name
        Label used in log messages (usually the TSV filename).
    path
        Source events file, ``None`` for in-memory datasets.
    events
        Event records; every record maps native field names to values.
    bids
        Annotation attached by a previous commit, if any.
    saved
        ``False`` once a commit modified the dataset.
    history
        Commands applied to the dataset, oldest first.
    """

    name: str = "dataset"
    path: Optional[Path] = None
    events: List[Dict[str, Any]] = Field(default_factory=list)
    bids: Optional[BidsEventInfo] = None
    saved: bool = True
    history: List[str] = Field(default_factory=list)
