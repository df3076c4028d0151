"""
Editing session bound to a set of datasets.

The session is what a presentation layer talks to. It owns the
:class:`~bidseventinfo.registry.EventRegistry` (the only mutable state of an
edit), answers the queries needed to render the editor, and finishes with
either :meth:`EventInfoSession.commit` or :meth:`EventInfoSession.cancel`.

Typical use::

    session = EventInfoSession.open(datasets)
    session.registry.set_native_mapping("trial_type", "condition")
    session.registry.set_level_description("trial_type", "go", "Go trial")
    info = session.commit()
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from bidseventinfo.config import EventInfoSettings, load_settings
from bidseventinfo.datasets import resolve_native_schema, select_prior_info
from bidseventinfo.levels import check_format, collect_unique_values
from bidseventinfo.models import (
    HISTORY_COMMAND,
    NO_LEVEL_FIELDS,
    BIDSField,
    BidsEventInfo,
    EventDataset,
)
from bidseventinfo.registry import EventRegistry
from bidseventinfo.utils.errors import (
    SessionClosedError,
    UnmappedFieldError,
    UnsupportedLevelEditError,
)

log = logging.getLogger(__name__)

__all__ = ["EventInfoSession", "LevelTable", "apply_defaults"]


class LevelTable(BaseModel):
    """Rows offered for describing the levels of one BIDS field.

    Attributes
    ----------
    bids_field / native_field
        Field being described and the event field its values come from.
    rows
        ``(canonical key, current description)`` pairs.
    n_values
        Number of distinct values found in the events.
    exceeds_threshold
        ``True`` when the rows were withheld because there are more values
        than the level threshold; ask the user, then call again with
        ``force=True``.
    """

    bids_field: str
    native_field: str
    rows: List[Tuple[str, str]] = Field(default_factory=list)
    n_values: int = 0
    exceeds_threshold: bool = False


class EventInfoSession:
    """Single-owner edit session over *datasets*."""

    def __init__(
        self,
        datasets: Sequence[EventDataset],
        registry: EventRegistry,
        settings: EventInfoSettings,
    ) -> None:
        self.datasets = list(datasets)
        self.settings = settings
        self._registry: Optional[EventRegistry] = registry

    @classmethod
    def open(
        cls,
        datasets: Sequence[EventDataset],
        settings: Optional[EventInfoSettings] = None,
    ) -> "EventInfoSession":
        """Start a session, resuming from saved BIDS info when present."""
        settings = settings or load_settings()
        schema = resolve_native_schema(datasets)
        registry = EventRegistry.initialize(
            schema, prior=select_prior_info(datasets), settings=settings
        )
        return cls(datasets, registry, settings)

    # ------------------------------------------------------------------ #
    @property
    def closed(self) -> bool:
        return self._registry is None

    @property
    def registry(self) -> EventRegistry:
        """Registry receiving the edit commands."""
        if self._registry is None:
            raise SessionClosedError("The edit session has already been closed")
        return self._registry

    @property
    def native_schema(self) -> Tuple[str, ...]:
        return self.registry.native_schema

    def start_fresh(self) -> EventRegistry:
        """Replace the registry with one built from the defaults."""
        self._registry = EventRegistry.initialize(
            self.registry.native_schema, settings=self.settings
        )
        log.info("[eventinfo] started fresh from default BIDS event info")
        return self._registry

    # ------------------------------------------------------------------ #
    # Presentation queries
    # ------------------------------------------------------------------ #
    def available_native_fields(self, bids_field: BIDSField | str) -> List[str]:
        """Return native fields not yet used by any other BIDS field."""
        used = set(self.registry.used_native_fields(exclude=bids_field))
        return [f for f in self.registry.native_schema if f not in used]

    def level_table(self, bids_field: BIDSField | str, *, force: bool = False) -> LevelTable:
        """Collect the level rows of a categorical field.

        Args:
            bids_field: Field whose levels are described.
            force: Build the rows even above the level threshold.

        Raises:
            UnsupportedLevelEditError: For continuous fields and ``HED``.
            UnmappedFieldError: If the field has no native field.
            MissingFieldError: If a dataset lacks the native field.
        """
        field = BIDSField.parse(bids_field)
        if field in NO_LEVEL_FIELDS:
            raise UnsupportedLevelEditError(field.value)
        entry = self.registry[field]
        if not entry.is_mapped:
            raise UnmappedFieldError(field.value)

        values = collect_unique_values(self.datasets, entry.native_field)
        table = LevelTable(
            bids_field=field.value,
            native_field=entry.native_field,
            n_values=len(values),
        )
        if not entry.levels and len(values) > self.settings.level_threshold and not force:
            log.warning(
                "[eventinfo] more than %d unique levels for field %s",
                self.settings.level_threshold,
                entry.native_field,
            )
            table.exceeds_threshold = True
            return table

        keys = [check_format(v) for v in values]
        table.rows = [(k, entry.levels.get(k, "")) for k in dict.fromkeys(keys)]
        return table

    # ------------------------------------------------------------------ #
    # Session end
    # ------------------------------------------------------------------ #
    def commit(self) -> BidsEventInfo:
        """Store the annotation on every dataset and close the session.

        Each dataset receives its own copy of the artifacts, is flagged as
        unsaved and gets :data:`HISTORY_COMMAND` appended to its history.
        """
        info = self.registry.to_export_artifacts()
        for ds in self.datasets:
            ds.bids = info.model_copy(deep=True)
            ds.saved = False
            ds.history.append(HISTORY_COMMAND)
        log.info(
            "[eventinfo] committed %d mapped field(s) to %d dataset(s)",
            len(info.mapping),
            len(self.datasets),
        )
        self._registry = None
        return info

    def cancel(self) -> None:
        """Discard every edit and close the session."""
        if self.closed:
            raise SessionClosedError("The edit session has already been closed")
        self._registry = None
        log.info("[eventinfo] edit cancelled")


def apply_defaults(
    datasets: Sequence[EventDataset],
    settings: Optional[EventInfoSettings] = None,
) -> BidsEventInfo:
    """Commit the starting annotation without any interactive edit."""
    return EventInfoSession.open(datasets, settings=settings).commit()
