"""Tests for configuration defaults and env overrides."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from csvbridge.core.config import AppSettings, ImportConfig, RedisConfig


def test_default_settings():
    settings = AppSettings()
    assert settings.environment == "dev"
    assert settings.imports.write_delay_seconds == 0.1
    assert settings.dynamodb.listings_table == "csvbridge-listings"


def test_import_config_defaults():
    config = ImportConfig()
    assert config.year_probe_rows == 3
    assert (config.min_year, config.max_year) == (1900, 2100)
    assert config.list_delimiter == "|"
    assert config.allowed_extensions == [".csv"]
    assert config.mapping_conflict_policy == "last_wins"


def test_env_override(monkeypatch):
    monkeypatch.setenv("CSVBRIDGE_IMPORT_WRITE_DELAY_SECONDS", "0")
    monkeypatch.setenv("CSVBRIDGE_IMPORT_MAPPING_CONFLICT_POLICY", "first_wins")
    config = ImportConfig()
    assert config.write_delay_seconds == 0
    assert config.mapping_conflict_policy == "first_wins"


def test_rejects_unknown_policy():
    with pytest.raises(ValidationError):
        ImportConfig(mapping_conflict_policy="random")


def test_progress_ttl_default():
    assert RedisConfig().progress_ttl_seconds == 4 * 60 * 60
