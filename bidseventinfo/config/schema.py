"""
Pydantic models that mirror the YAML settings consumed by *bidseventinfo*.

The settings carry everything the editor treats as product data rather than
logic: the default annotation of each BIDS field, the descriptions always
exported on commit, the unit vocabularies offered to the user, the column
help text and the level threshold.
"""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field, field_validator

from bidseventinfo.models import BIDSField

# --------------------------------------------------------------------------- #
# 1.  Leaf models                                                             #
# --------------------------------------------------------------------------- #


class FieldDefaults(BaseModel):
    """Default annotation of one BIDS field for a fresh registry.

    Attributes:
        native_field: Native event field the BIDS field maps to.
        long_name: Default long name.
        description: Default description.
        units: Default units.
        only_if_present: Apply the defaults only when *native_field* exists in
            the native schema (used for ``HED`` → ``usertags``).
    """

    native_field: str = ""
    long_name: str = ""
    description: str = ""
    units: str = ""
    only_if_present: bool = False


class ExportDescription(BaseModel):
    """Description entry always written on commit."""

    LongName: str = ""
    Description: str = ""
    Units: str = ""

    def as_sidecar(self) -> Dict[str, str]:
        """Return the non-empty keys."""
        return {k: v for k, v in self.model_dump().items() if v}


def _check_bids_keys(value: dict) -> dict:
    """Reject keys outside the BIDS field vocabulary."""
    unknown = sorted(k for k in value if k not in {f.value for f in BIDSField})
    if unknown:
        raise ValueError("Unknown BIDS field(s): " + ", ".join(unknown))
    return value


# --------------------------------------------------------------------------- #
# 2.  Top-level model                                                         #
# --------------------------------------------------------------------------- #


class EventInfoSettings(BaseModel):
    """Root settings object consumed by the registry, session and CLI.

    Attributes:
        version: Version string of the settings schema.
        level_threshold: Number of distinct values above which describing
            levels needs an explicit confirmation.
        unit_names: SI unit names offered for the ``Units`` column.
        unit_prefixes: SI prefixes offered for the ``Units`` column.
        column_definitions: Help text per sidecar key.
        defaults: Default annotation per BIDS field.
        export_descriptions: Descriptions always present after a commit.
    """

    version: str
    level_threshold: int = Field(20, ge=0)
    unit_names: List[str] = Field(default_factory=list)
    unit_prefixes: List[str] = Field(default_factory=list)
    column_definitions: Dict[str, str] = Field(default_factory=dict)
    defaults: Dict[str, FieldDefaults] = Field(default_factory=dict)
    export_descriptions: Dict[str, ExportDescription] = Field(default_factory=dict)

    @field_validator("defaults", "export_descriptions")
    @classmethod
    def _fields_are_known(cls, value: dict) -> dict:
        """Ensure every per-field section names a BIDS field."""
        return _check_bids_keys(value)

    def defaults_for(self, field: BIDSField) -> FieldDefaults:
        """Return the defaults of *field* (empty when not configured)."""
        return self.defaults.get(field.value, FieldDefaults())
