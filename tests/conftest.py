"""Pytest configuration for bidseventinfo tests."""

import pytest

# Skip the entire suite when the table reader is unavailable.
pytest.importorskip("pandas")


@pytest.fixture(autouse=True)
def _log_dir(tmp_path, monkeypatch):
    """Keep rotating log files of CLI runs inside the test directory."""
    monkeypatch.setenv("BIDSEVENTINFO_LOG_DIR", str(tmp_path / "logs"))
