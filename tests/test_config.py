"""Tests for configuration loading.

**Feature: trade-journal**
"""

from pathlib import Path

import pytest

from tradejournal.config import (
    get_config_dir,
    get_db_path,
    get_log_level,
    get_owner_id,
    load_config,
    save_config,
)


@pytest.fixture
def config_home(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.setenv("TRADEJOURNAL_HOME", str(tmp_path))
    return tmp_path


class TestConfig:
    """Tests for config.toml handling."""

    def test_missing_config_is_empty(self, config_home: Path):
        assert get_config_dir() == config_home
        assert load_config() == {}

    def test_defaults(self, config_home: Path):
        assert get_owner_id({}) == "local"
        assert get_db_path({}) == config_home / "tradejournal.db"
        assert get_log_level({}) == "WARNING"

    def test_save_and_load(self, config_home: Path):
        save_config({"user": {"owner_id": "me"}, "logging": {"level": "info"}})

        config = load_config()

        assert get_owner_id(config) == "me"
        assert get_log_level(config) == "INFO"

    def test_configured_db_path(self, config_home: Path):
        assert get_db_path({"database": {"path": str(config_home / "x.db")}}) == config_home / "x.db"

    def test_invalid_toml_is_empty(self, config_home: Path):
        (config_home / "config.toml").write_text("[user\nowner_id = ")

        assert load_config() == {}
