"""
Event metadata registry.

:class:`EventRegistry` holds one :class:`~bidseventinfo.models.FieldAnnotation`
per BIDS event field and implements the edit commands issued by a
presentation layer:

* :meth:`EventRegistry.set_native_mapping`
* :meth:`EventRegistry.set_text`
* :meth:`EventRegistry.set_units`
* :meth:`EventRegistry.set_level_description`

Every command validates before it mutates, so a rejected edit leaves the
registry exactly as it was. :meth:`EventRegistry.to_export_artifacts` turns
the current state into the description dictionary and field-mapping table
stored on the dataset.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from bidseventinfo.config import EventInfoSettings, load_settings
from bidseventinfo.levels import check_format, join_levels
from bidseventinfo.models import (
    NO_LEVEL_FIELDS,
    NOT_APPLICABLE,
    UNSPECIFIED_LEVELS,
    BIDSField,
    BidsEventInfo,
    FieldAnnotation,
)
from bidseventinfo.utils.errors import (
    DuplicateMappingError,
    UnmappedFieldError,
    UnknownFieldError,
    UnsupportedLevelEditError,
)
from bidseventinfo.utils.merge import deep_update

log = logging.getLogger(__name__)

__all__ = ["EventRegistry", "TEXT_ATTRIBUTES"]

# Attributes accepted by :meth:`EventRegistry.set_text`.
TEXT_ATTRIBUTES = ("long_name", "description", "term_url")


class EventRegistry:
    """Mapping from every BIDS event field to its annotation.

    Build instances with :meth:`initialize`; the constructor expects the
    complete entry table.
    """

    def __init__(
        self,
        entries: Dict[BIDSField, FieldAnnotation],
        *,
        native_schema: Iterable[str] = (),
        settings: Optional[EventInfoSettings] = None,
    ) -> None:
        missing = [f.value for f in BIDSField if f not in entries]
        if missing:
            raise ValueError("Registry lacks entries for: " + ", ".join(missing))
        self._entries = dict(entries)
        self.native_schema: Tuple[str, ...] = tuple(native_schema)
        self.settings = settings or load_settings()

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #
    @classmethod
    def initialize(
        cls,
        native_schema: Iterable[str],
        prior: Optional[BidsEventInfo] = None,
        settings: Optional[EventInfoSettings] = None,
    ) -> "EventRegistry":
        """Return a new registry for *native_schema*.

        Args:
            native_schema: Ordered native event field names.
            prior: Annotation set from a previous commit. When given, the
                registry resumes from it; otherwise built-in defaults apply.
            settings: Settings providing the defaults. Loaded when omitted.

        Returns:
            Registry containing exactly one entry per BIDS field.
        """
        settings = settings or load_settings()
        schema = tuple(dict.fromkeys(native_schema))
        if prior is not None:
            entries = cls._entries_from_prior(prior)
        else:
            entries = cls._default_entries(schema, settings)
        return cls(entries, native_schema=schema, settings=settings)

    @staticmethod
    def _entries_from_prior(prior: BidsEventInfo) -> Dict[BIDSField, FieldAnnotation]:
        """Resume from a saved annotation set, back-filling missing fields."""
        entries: Dict[BIDSField, FieldAnnotation] = {}
        owners: Dict[str, BIDSField] = {}
        for bids_name, native in prior.mapping:
            try:
                field = BIDSField.parse(bids_name)
            except UnknownFieldError:
                log.warning("[eventinfo] ignored saved mapping for unknown field '%s'", bids_name)
                continue
            if field in entries:
                log.warning("[eventinfo] ignored repeated saved mapping for '%s'", field)
                continue
            if native and native in owners:
                log.warning(
                    "[eventinfo] '%s' already mapped to '%s'; '%s' left unmapped",
                    native,
                    owners[native],
                    field,
                )
                native = ""
            if native:
                owners[native] = field
            entries[field] = FieldAnnotation.from_sidecar(
                native, prior.descriptions.get(field.value)
            )
        for field in BIDSField:
            entries.setdefault(field, FieldAnnotation())
        return entries

    @staticmethod
    def _default_entries(
        schema: Tuple[str, ...], settings: EventInfoSettings
    ) -> Dict[BIDSField, FieldAnnotation]:
        """Return the built-in starting annotation of every BIDS field."""
        entries: Dict[BIDSField, FieldAnnotation] = {}
        for field in BIDSField:
            spec = settings.defaults_for(field)
            if spec.only_if_present and spec.native_field not in schema:
                entries[field] = FieldAnnotation()
                continue
            entries[field] = FieldAnnotation(
                native_field=spec.native_field,
                long_name=spec.long_name,
                description=spec.description,
                units=spec.units,
            )
        return entries

    # ------------------------------------------------------------------ #
    # Read access
    # ------------------------------------------------------------------ #
    def __getitem__(self, bids_field: BIDSField | str) -> FieldAnnotation:
        return self._entries[BIDSField.parse(bids_field)]

    def __iter__(self) -> Iterator[BIDSField]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> List[BIDSField]:
        """Return the BIDS fields in registry order."""
        return list(self._entries)

    def items(self) -> List[Tuple[BIDSField, FieldAnnotation]]:
        """Return ``(field, annotation)`` pairs in registry order."""
        return list(self._entries.items())

    def owner_of(self, native_field: str) -> Optional[BIDSField]:
        """Return the BIDS field currently mapped to *native_field*."""
        if not native_field:
            return None
        for field, entry in self._entries.items():
            if entry.native_field == native_field:
                return field
        return None

    def used_native_fields(self, exclude: BIDSField | str | None = None) -> List[str]:
        """Return mapped native fields, optionally ignoring one BIDS field."""
        skip = BIDSField.parse(exclude) if exclude is not None else None
        return [
            entry.native_field
            for field, entry in self._entries.items()
            if entry.native_field and field is not skip
        ]

    def mapped_fields(self) -> List[BIDSField]:
        """Return the BIDS fields that have a native field."""
        return [f for f, e in self._entries.items() if e.is_mapped]

    def levels_summary(self, bids_field: BIDSField | str) -> str:
        """Return the text shown in the "Levels" column for *bids_field*."""
        field = BIDSField.parse(bids_field)
        if field in NO_LEVEL_FIELDS:
            return NOT_APPLICABLE
        levels = self._entries[field].levels
        return join_levels(levels) if levels else UNSPECIFIED_LEVELS

    # ------------------------------------------------------------------ #
    # Edit commands
    # ------------------------------------------------------------------ #
    def _mapped_entry(self, field: BIDSField) -> FieldAnnotation:
        entry = self._entries[field]
        if not entry.is_mapped:
            raise UnmappedFieldError(field.value)
        return entry

    def set_native_mapping(self, bids_field: BIDSField | str, native_field: str) -> None:
        """Map *bids_field* to *native_field* (``""`` unmaps it).

        Raises:
            DuplicateMappingError: If *native_field* already belongs to a
                different BIDS field. The registry is left unchanged.
        """
        field = BIDSField.parse(bids_field)
        native_field = native_field or ""
        owner = self.owner_of(native_field)
        if owner is not None and owner is not field:
            raise DuplicateMappingError(native_field, owner.value, field.value)
        if native_field and self.native_schema and native_field not in self.native_schema:
            log.debug("[eventinfo] '%s' is not a field of the event table", native_field)
        self._entries[field].native_field = native_field
        log.debug("[eventinfo] %s → '%s'", field, native_field)

    def set_text(self, bids_field: BIDSField | str, attribute: str, value: str) -> None:
        """Set ``long_name``, ``description`` or ``term_url`` of a mapped field.

        Raises:
            ValueError: If *attribute* is not a text attribute.
            UnmappedFieldError: If *bids_field* has no native field.
        """
        if attribute not in TEXT_ATTRIBUTES:
            raise ValueError(
                f"Unknown attribute '{attribute}'; expected one of {', '.join(TEXT_ATTRIBUTES)}"
            )
        entry = self._mapped_entry(BIDSField.parse(bids_field))
        setattr(entry, attribute, value or "")

    def set_units(
        self, bids_field: BIDSField | str, prefix: str | None, name: str | None
    ) -> None:
        """Store ``prefix + name`` as the units of a mapped field.

        Raises:
            UnmappedFieldError: If *bids_field* has no native field.
        """
        entry = self._mapped_entry(BIDSField.parse(bids_field))
        entry.units = (prefix or "").strip() + (name or "").strip()

    def set_level_description(
        self, bids_field: BIDSField | str, raw_value: object, description: str
    ) -> str:
        """Describe one level of a categorical field.

        Args:
            bids_field: Field whose level is described.
            raw_value: Level value as found in the event records.
            description: Free-text description.

        Returns:
            The canonical key under which the description was stored.

        Raises:
            UnsupportedLevelEditError: For ``onset``, ``sample``, ``duration``
                and ``HED``.
            UnmappedFieldError: If *bids_field* has no native field.
        """
        field = BIDSField.parse(bids_field)
        if field in NO_LEVEL_FIELDS:
            raise UnsupportedLevelEditError(field.value)
        entry = self._mapped_entry(field)
        key = check_format(raw_value)
        entry.levels = {**entry.levels, key: description or ""}
        return key

    # ------------------------------------------------------------------ #
    # Commit
    # ------------------------------------------------------------------ #
    def to_export_artifacts(self) -> BidsEventInfo:
        """Return the description dictionary and field-mapping table.

        The settings' export descriptions form the base layer of the
        dictionary; attributes of mapped fields are merged over them so user
        edits always win.
        """
        descriptions: Dict[str, dict] = {
            name: desc.as_sidecar()
            for name, desc in self.settings.export_descriptions.items()
        }
        mapping: List[Tuple[str, str]] = []
        for field, entry in self._entries.items():
            if not entry.is_mapped:
                continue
            mapping.append((field.value, entry.native_field))
            descriptions[field.value] = deep_update(
                descriptions.get(field.value, {}), entry.to_sidecar()
            )
        return BidsEventInfo(descriptions=descriptions, mapping=mapping)
