"""Tests for the YAML settings loader."""

from pathlib import Path

import pytest

from bidseventinfo.config import EventInfoSettings, load_settings
from bidseventinfo.models import BIDSField


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def test_packaged_defaults():
    """Verify the shipped settings."""
    settings = load_settings()
    assert isinstance(settings, EventInfoSettings)
    assert settings.level_threshold == 20
    assert "second" in settings.unit_names
    assert "milli" in settings.unit_prefixes
    assert set(settings.column_definitions) == {
        "LongName",
        "Description",
        "Levels",
        "Units",
        "TermURL",
    }
    assert settings.defaults_for(BIDSField.VALUE).native_field == "type"
    assert settings.defaults_for(BIDSField.HED).only_if_present
    assert settings.defaults_for(BIDSField.TRIAL_TYPE).native_field == ""
    assert set(settings.export_descriptions) == {
        "duration",
        "sample",
        "trial_type",
        "response_time",
        "stim_file",
    }


def test_dataset_local_override(tmp_path):
    """Verify <root>/code/config/eventinfo.yaml is merged over the defaults."""
    _write(
        tmp_path / "code" / "config" / "eventinfo.yaml",
        "level_threshold: 5\n"
        "defaults:\n"
        "  value:\n"
        "    native_field: code\n",
    )
    settings = load_settings(dataset_root=tmp_path)
    assert settings.level_threshold == 5
    assert settings.defaults_for(BIDSField.VALUE).native_field == "code"
    # untouched keys keep their packaged value
    assert settings.defaults_for(BIDSField.VALUE).long_name == "Event marker"
    assert settings.defaults_for(BIDSField.ONSET).units == "second"


def test_root_without_local_file(tmp_path):
    """Verify a dataset root without override falls back to the defaults."""
    assert load_settings(dataset_root=tmp_path).level_threshold == 20


def test_explicit_path_wins(tmp_path):
    """Verify an explicit path is preferred over the dataset-local file."""
    _write(tmp_path / "code" / "config" / "eventinfo.yaml", "level_threshold: 5\n")
    explicit = _write(tmp_path / "custom.yaml", "level_threshold: 7\n")
    assert load_settings(explicit, dataset_root=tmp_path).level_threshold == 7


def test_missing_explicit_path(tmp_path):
    """Verify a missing explicit file is reported."""
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "text",
    [
        "level_threshold: -1\n",
        "defaults:\n  Trial_Type:\n    native_field: cond\n",
        "export_descriptions:\n  latency:\n    LongName: x\n",
    ],
)
def test_invalid_settings(tmp_path, text):
    """Verify invalid settings raise RuntimeError."""
    bad = _write(tmp_path / "bad.yaml", text)
    with pytest.raises(RuntimeError, match="Invalid configuration"):
        load_settings(bad)


def test_empty_override_is_ignored(tmp_path):
    """Verify an empty YAML document changes nothing."""
    empty = _write(tmp_path / "empty.yaml", "")
    assert load_settings(empty) == load_settings()
