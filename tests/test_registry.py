"""Unit tests for the event metadata registry – no file I/O involved."""

import pytest

from bidseventinfo.models import (
    ONSET_NATIVE_FIELD,
    SAMPLE_NATIVE_FIELD,
    BIDSField,
    BidsEventInfo,
)
from bidseventinfo.registry import EventRegistry
from bidseventinfo.utils.errors import (
    DuplicateMappingError,
    UnknownFieldError,
    UnmappedFieldError,
    UnsupportedLevelEditError,
)

SCHEMA = ["type", ONSET_NATIVE_FIELD, "duration", "usertags", SAMPLE_NATIVE_FIELD]


def _fresh(schema=SCHEMA) -> EventRegistry:
    return EventRegistry.initialize(schema)


def test_fresh_registry_has_every_bids_field():
    """A fresh registry holds exactly the fixed BIDS fields."""
    reg = _fresh()
    assert set(reg.keys()) == set(BIDSField)
    assert len(reg) == 8


def test_fresh_registry_defaults():
    """Built-in defaults map value, onset, sample, duration and HED."""
    reg = _fresh()
    assert reg["value"].native_field == "type"
    assert reg["value"].long_name == "Event marker"
    assert reg["onset"].native_field == ONSET_NATIVE_FIELD
    assert reg["onset"].units == "second"
    assert reg["sample"].native_field == SAMPLE_NATIVE_FIELD
    assert reg["duration"].native_field == "duration"
    assert reg["duration"].units == "second"
    assert reg["HED"].native_field == "usertags"
    for name in ("trial_type", "stim_file", "response_time"):
        assert reg[name].native_field == ""
        assert reg[name].description == ""


def test_hed_unmapped_without_usertags():
    """HED stays unmapped and empty when the events carry no usertags."""
    reg = _fresh(["type", ONSET_NATIVE_FIELD, "duration", SAMPLE_NATIVE_FIELD])
    assert reg["HED"].native_field == ""
    assert reg["HED"].long_name == ""


def test_unknown_field_lookup_rejected():
    """Lookups outside the BIDS vocabulary fail."""
    reg = _fresh()
    with pytest.raises(UnknownFieldError):
        reg["latency"]
    with pytest.raises(UnknownFieldError):
        reg.set_native_mapping("Onset", "latency")


def test_duplicate_mapping_rejected():
    """A native field cannot serve two BIDS fields."""
    reg = _fresh()
    reg.set_native_mapping("trial_type", "condition")
    with pytest.raises(DuplicateMappingError) as exc:
        reg.set_native_mapping("stim_file", "condition")
    assert exc.value.owner == "trial_type"
    assert reg["stim_file"].native_field == ""
    assert reg["trial_type"].native_field == "condition"


def test_set_native_mapping_idempotent():
    """Re-applying the current mapping is accepted."""
    reg = _fresh()
    reg.set_native_mapping("value", "type")
    reg.set_native_mapping("value", "type")
    assert reg["value"].native_field == "type"
    assert reg.used_native_fields().count("type") == 1


def test_unmap_frees_native_field():
    """Unmapping a field lets another field take its native column."""
    reg = _fresh()
    reg.set_native_mapping("value", "")
    reg.set_native_mapping("trial_type", "type")
    assert reg["trial_type"].native_field == "type"
    assert reg.owner_of("type") is BIDSField.TRIAL_TYPE


def test_text_edit_requires_mapping():
    """Text attributes can only be set once a native field is chosen."""
    reg = _fresh()
    with pytest.raises(UnmappedFieldError):
        reg.set_text("trial_type", "description", "Condition")
    assert reg["trial_type"].description == ""

    reg.set_native_mapping("trial_type", "condition")
    reg.set_text("trial_type", "description", "Condition")
    reg.set_text("trial_type", "term_url", "https://example.org/condition")
    assert reg["trial_type"].description == "Condition"
    assert reg["trial_type"].term_url == "https://example.org/condition"


def test_text_edit_unknown_attribute():
    """Only long_name, description and term_url are text attributes."""
    reg = _fresh()
    with pytest.raises(ValueError):
        reg.set_text("value", "units", "second")


def test_units_concatenate_prefix_and_name():
    """Units are stored as prefix + name; blanks are ignored."""
    reg = _fresh()
    reg.set_native_mapping("response_time", "rt")
    reg.set_units("response_time", "milli", "second")
    assert reg["response_time"].units == "millisecond"
    reg.set_units("response_time", " ", "second")
    assert reg["response_time"].units == "second"
    reg.set_units("response_time", None, None)
    assert reg["response_time"].units == ""
    with pytest.raises(UnmappedFieldError):
        reg.set_units("stim_file", "", "second")


@pytest.mark.parametrize("field", ["onset", "sample", "duration", "HED"])
def test_level_edit_refused_for_continuous_fields(field):
    """Continuous fields and HED never receive level descriptions."""
    reg = _fresh()
    with pytest.raises(UnsupportedLevelEditError):
        reg.set_level_description(field, "1", "one")
    assert reg[field].levels == {}


def test_level_edit_stores_canonical_key():
    """Level values are stored under their canonical key."""
    reg = _fresh()
    assert reg.set_level_description("value", "12", "twelve") == "x12"
    assert reg.set_level_description("value", 3, "three") == "x3"
    reg.set_native_mapping("trial_type", "condition")
    reg.set_level_description("trial_type", "left arrow", "Left")
    assert reg["value"].levels == {"x12": "twelve", "x3": "three"}
    assert reg["trial_type"].levels == {"left_arrow": "Left"}
    assert reg.levels_summary("value") == "x12,x3"


def test_level_edit_requires_mapping():
    """Levels of an unmapped field cannot be described."""
    reg = _fresh()
    with pytest.raises(UnmappedFieldError):
        reg.set_level_description("trial_type", "go", "Go")


def test_levels_summary_texts():
    """The Levels column shows n/a, a prompt, or the specified keys."""
    reg = _fresh()
    assert reg.levels_summary("onset") == "n/a"
    assert reg.levels_summary("HED") == "n/a"
    assert reg.levels_summary("trial_type") == "Click to specify below"


def test_export_contains_mapped_rows_and_fixed_descriptions():
    """Only mapped fields yield rows; fixed descriptions are always present."""
    reg = _fresh()
    info = reg.to_export_artifacts()
    assert info.mapping == [
        ("onset", ONSET_NATIVE_FIELD),
        ("duration", "duration"),
        ("value", "type"),
        ("sample", SAMPLE_NATIVE_FIELD),
        ("HED", "usertags"),
    ]
    for name in ("duration", "sample", "trial_type", "response_time", "stim_file"):
        assert "LongName" in info.descriptions[name]
    assert info.descriptions["value"] == {
        "LongName": "Event marker",
        "Description": "Marker value associated with the event",
    }
    assert "Levels" not in info.descriptions["onset"]


def test_export_keeps_user_edits_over_fixed_descriptions():
    """User text wins over the always-exported descriptions."""
    reg = _fresh()
    reg.set_text("duration", "description", "Stimulus presentation time")
    reg.set_native_mapping("response_time", "rt")
    reg.set_units("response_time", "milli", "second")
    info = reg.to_export_artifacts()
    assert info.descriptions["duration"]["Description"] == "Stimulus presentation time"
    assert info.descriptions["duration"]["Units"] == "second"
    assert info.descriptions["response_time"]["Units"] == "millisecond"
    assert info.descriptions["response_time"]["LongName"] == "Response time"


def test_export_is_deterministic():
    """Two exports of the same state are identical."""
    reg = _fresh()
    reg.set_native_mapping("trial_type", "condition")
    reg.set_level_description("trial_type", "go", "Go")
    first = reg.to_export_artifacts().model_dump_json()
    assert reg.to_export_artifacts().model_dump_json() == first


def test_resume_round_trip():
    """Exporting a registry resumed from artifacts reproduces them."""
    prior = BidsEventInfo(
        descriptions={
            "value": {
                "LongName": "Marker",
                "Description": "Trigger code",
                "Levels": {"x1": "standard", "x2": "deviant"},
                "TermURL": "https://example.org/marker",
            },
            "trial_type": {"Description": "Condition", "Levels": {"go": "Go"}},
        },
        mapping=[("trial_type", "condition"), ("value", "type")],
    )
    reg = EventRegistry.initialize(SCHEMA, prior=prior)
    assert set(reg.keys()) == set(BIDSField)
    assert reg["onset"].native_field == ""

    out = reg.to_export_artifacts()
    assert out.mapping == prior.mapping
    assert out.descriptions["value"] == prior.descriptions["value"]
    assert out.descriptions["trial_type"]["Description"] == "Condition"
    assert out.descriptions["trial_type"]["Levels"] == {"go": "Go"}


def test_resume_skips_unknown_and_duplicate_rows():
    """Saved rows outside the vocabulary or reusing a native field are dropped."""
    prior = BidsEventInfo(
        descriptions={"Value": {"LongName": "typo"}},
        mapping=[("Value", "type"), ("value", "type"), ("trial_type", "type")],
    )
    reg = EventRegistry.initialize(SCHEMA, prior=prior)
    assert reg["value"].native_field == "type"
    assert reg["trial_type"].native_field == ""
    assert len(reg) == 8


def test_resume_ignores_not_applicable_levels():
    """A saved 'n/a' Levels value loads as no levels."""
    prior = BidsEventInfo(
        descriptions={"stim_file": {"Levels": "n/a"}},
        mapping=[("stim_file", "stimulus")],
    )
    reg = EventRegistry.initialize(SCHEMA, prior=prior)
    assert reg["stim_file"].levels == {}
    assert "Levels" not in reg.to_export_artifacts().descriptions["stim_file"]


def test_end_to_end_scenario():
    """Defaults for an EEGLAB schema, then map trial_type and export."""
    reg = EventRegistry.initialize(SCHEMA)
    assert reg["value"].native_field == "type"
    assert reg["onset"].native_field == ONSET_NATIVE_FIELD
    assert reg["sample"].native_field == SAMPLE_NATIVE_FIELD
    assert reg["duration"].native_field == "duration"
    assert reg["HED"].native_field == "usertags"
    assert not any(reg[f].is_mapped for f in ("trial_type", "stim_file", "response_time"))

    reg.set_native_mapping("trial_type", "condition")
    assert ("trial_type", "condition") in reg.to_export_artifacts().mapping


def test_mapped_fields_follow_edits():
    """mapped_fields lists the fields with a native field, in registry order."""
    reg = _fresh()
    assert reg.mapped_fields() == [
        BIDSField.ONSET,
        BIDSField.DURATION,
        BIDSField.VALUE,
        BIDSField.SAMPLE,
        BIDSField.HED,
    ]
    reg.set_native_mapping("HED", "")
    reg.set_native_mapping("trial_type", "condition")
    assert BIDSField.HED not in reg.mapped_fields()
    assert BIDSField.TRIAL_TYPE in reg.mapped_fields()
