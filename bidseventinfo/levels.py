"""Distinct-value collection and level-key canonicalisation.

Categorical BIDS columns describe each of their values under ``Levels``.
:func:`collect_unique_values` gathers those values from the native event
records of one or more datasets, and :func:`check_format` turns each value
into the key stored in the registry.
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import Any, Iterable, List, Mapping, Sequence

from bidseventinfo.models import EventDataset
from bidseventinfo.utils.errors import MissingFieldError

log = logging.getLogger(__name__)

__all__ = ["canonical_string", "check_format", "collect_unique_values", "join_levels"]

# Prepended to numeric values so level keys never start with a digit.
NUMERIC_PREFIX = "x"


def _is_number(text: str) -> bool:
    """Return ``True`` when *text* parses as a number.

    Underscore digit grouping (``"1_000"``) is not a number: such text is
    what :func:`check_format` produces from ``"1 000"``.
    """
    if "_" in text:
        return False
    try:
        float(text)
    except ValueError:
        return False
    return True


def canonical_string(value: Any) -> str:
    """Return the string form used to compare event values.

    Integral numbers print without a decimal part so ``1`` and ``1.0``
    collapse to ``"1"``.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, numbers.Integral) and not isinstance(value, bool):
        return str(int(value))
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        value = float(value)
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def check_format(raw: Any) -> str:
    """Return the registry key for the level value *raw*.

    Numbers are prefixed with ``x`` (``"12"`` → ``"x12"``); any other value
    has its spaces replaced by underscores (``"left arrow"`` →
    ``"left_arrow"``).
    """
    text = canonical_string(raw)
    if _is_number(text):
        return f"{NUMERIC_PREFIX}{text}"
    return text.replace(" ", "_")


def join_levels(levels: Mapping[str, str]) -> str:
    """Return the comma-joined level keys shown in the "Levels" column."""
    return ",".join(levels)


def _is_missing(value: Any) -> bool:
    """Return ``True`` for empty cells (``None``, NaN, blank strings)."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return math.isnan(float(value))
    return False


def _events_of(dataset: EventDataset | Mapping[str, Any]) -> Sequence[Mapping[str, Any]]:
    """Return the event records of *dataset* (model or plain mapping)."""
    if isinstance(dataset, Mapping):
        return dataset.get("events") or []
    return dataset.events


def _name_of(dataset: EventDataset | Mapping[str, Any], index: int) -> str:
    if isinstance(dataset, Mapping):
        return str(dataset.get("name") or f"dataset #{index + 1}")
    return dataset.name


def collect_unique_values(
    datasets: Iterable[EventDataset | Mapping[str, Any]],
    native_field: str,
) -> List[str]:
    """Return the distinct values of *native_field* across *datasets*.

    Args:
        datasets: :class:`EventDataset` objects or mappings with an
            ``events`` list.
        native_field: Event field to scan.

    Returns:
        Canonical strings in first-seen order, each present once.

    Raises:
        MissingFieldError: If a record of any dataset lacks *native_field*.
    """
    seen: dict[str, None] = {}
    for idx, dataset in enumerate(datasets):
        for record in _events_of(dataset):
            if native_field not in record:
                raise MissingFieldError(native_field, _name_of(dataset, idx))
            value = record[native_field]
            if _is_missing(value):
                continue
            seen.setdefault(canonical_string(value), None)
    log.debug("[levels] %d distinct value(s) for '%s'", len(seen), native_field)
    return list(seen)
