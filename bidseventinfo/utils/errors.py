"""Custom exceptions raised by the event-info registry and its helpers."""

from __future__ import annotations


class EventInfoError(RuntimeError):
    """Base class for every error raised while editing BIDS event info."""

    pass


class UnknownFieldError(EventInfoError):
    """Raised when a name is not one of the recognised BIDS event fields."""

    pass


class InconsistentSchemaError(EventInfoError, UserWarning):
    """Datasets disagree on their event fields.

    Emitted through :func:`warnings.warn`; the caller recovers by using the
    richest schema.
    """

    pass


class DuplicateMappingError(EventInfoError):
    """Raised when a native field is already mapped to another BIDS field."""

    def __init__(self, native_field: str, owner: str, requested: str) -> None:
        self.native_field = native_field
        self.owner = owner
        self.requested = requested
        super().__init__(
            f"'{native_field}' is already mapped to '{owner}'; "
            f"cannot map it to '{requested}' as well"
        )


class UnmappedFieldError(EventInfoError):
    """Raised when editing a BIDS field that has no native field yet."""

    def __init__(self, bids_field: str) -> None:
        self.bids_field = bids_field
        super().__init__(f"Please select the matching event field for '{bids_field}' first")


class UnsupportedLevelEditError(EventInfoError):
    """Raised for level edits on continuous or HED-tagged fields."""

    def __init__(self, bids_field: str) -> None:
        self.bids_field = bids_field
        super().__init__(f"Levels editing is not applied for '{bids_field}'")


class MissingFieldError(EventInfoError):
    """Raised when a native field is absent from a dataset's event records."""

    def __init__(self, native_field: str, dataset: str) -> None:
        self.native_field = native_field
        self.dataset = dataset
        super().__init__(f"Event field '{native_field}' not found in {dataset}")


class SessionClosedError(EventInfoError):
    """Raised when a committed or cancelled session receives a command."""

    pass
