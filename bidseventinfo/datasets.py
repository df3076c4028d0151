"""Derive the editing context from one or more host datasets.

* :func:`resolve_native_schema` – native event fields offered for mapping.
* :func:`select_prior_info` – annotation set to resume from, if any.
"""

from __future__ import annotations

import logging
import warnings
from typing import List, Optional, Sequence

from bidseventinfo.models import (
    ONSET_NATIVE_FIELD,
    SAMPLE_NATIVE_FIELD,
    BidsEventInfo,
    EventDataset,
)
from bidseventinfo.utils.errors import EventInfoError, InconsistentSchemaError

log = logging.getLogger(__name__)

__all__ = ["dataset_fields", "resolve_native_schema", "select_prior_info"]


def dataset_fields(dataset: EventDataset) -> List[str]:
    """Return the event field names of *dataset* in first-seen order."""
    fields: dict[str, None] = {}
    for record in dataset.events:
        for name in record:
            fields.setdefault(name, None)
    return list(fields)


def resolve_native_schema(datasets: Sequence[EventDataset]) -> List[str]:
    """Return the native fields a BIDS field can be mapped to.

    When the datasets disagree, the schema of the dataset with the most
    fields is used (the first one on ties) and an
    :class:`InconsistentSchemaError` warning is emitted. ``latency`` is
    exposed as ``latency (converted to s)`` and ``latency (sample)`` is
    always appended.

    Args:
        datasets: Datasets being annotated together.

    Returns:
        Ordered list of native field names.

    Raises:
        EventInfoError: If there is no dataset or the first one has no events.
    """
    if not datasets or not datasets[0].events:
        raise EventInfoError("Event table is empty for the first dataset")

    per_dataset = [dataset_fields(ds) for ds in datasets]
    fields = per_dataset[0]
    if any(set(f) != set(fields) for f in per_dataset[1:]):
        idx = max(range(len(per_dataset)), key=lambda i: len(per_dataset[i]))
        fields = per_dataset[idx]
        msg = (
            "There is a mismatch in the event fields of the datasets. Using the "
            f"fields of {datasets[idx].name} which has the highest number of "
            f"fields ({len(fields)})."
        )
        log.warning("[eventinfo] %s", msg)
        warnings.warn(InconsistentSchemaError(msg), stacklevel=2)

    schema = [ONSET_NATIVE_FIELD if f == "latency" else f for f in fields]
    schema.append(SAMPLE_NATIVE_FIELD)
    return list(dict.fromkeys(schema))


def select_prior_info(datasets: Sequence[EventDataset]) -> Optional[BidsEventInfo]:
    """Return the annotation set of the first dataset that carries one."""
    carriers = [i for i, ds in enumerate(datasets) if ds.bids is not None]
    if not carriers:
        return None
    if len(carriers) != len(datasets):
        log.warning(
            "[eventinfo] BIDS event info found in %d out of %d dataset(s)",
            len(carriers),
            len(datasets),
        )
    first = datasets[carriers[0]]
    log.info("[eventinfo] using BIDS event info of %s", first.name)
    return first.bids.model_copy(deep=True)
