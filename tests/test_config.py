"""Tests for environment-based configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from dndspells.config import DEFAULT_BASE_URL, ConfigError, ScrapeConfig

ENV_VARS = [
    "NOTION_API_KEY",
    "NOTION_DATABASE_ID",
    "API_KEY",
    "DATABASE_ID",
    "DNDSPELLS_BASE_URL",
    "DNDSPELLS_WORKERS",
    "DNDSPELLS_DELAY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    # Keep load_dotenv from picking up a developer's .env
    monkeypatch.setattr("dndspells.config.load_dotenv", lambda: False)


def test_defaults():
    config = ScrapeConfig.from_env()
    assert config.base_url == DEFAULT_BASE_URL
    assert config.workers == 4
    assert config.delay == 0
    assert config.log_dir == Path("data/logs")
    assert config.notion_api_key is None


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("NOTION_API_KEY", "secret_abc")
    monkeypatch.setenv("NOTION_DATABASE_ID", "db1")
    monkeypatch.setenv("DNDSPELLS_WORKERS", "8")
    monkeypatch.setenv("DNDSPELLS_DELAY", "0.5")

    config = ScrapeConfig.from_env()

    assert config.require_notion() == ("secret_abc", "db1")
    assert config.workers == 8
    assert config.delay == 0.5


def test_legacy_variable_names(monkeypatch):
    monkeypatch.setenv("API_KEY", "secret_old")
    monkeypatch.setenv("DATABASE_ID", "db_old")
    assert ScrapeConfig.from_env().require_notion() == ("secret_old", "db_old")


def test_overrides_win(monkeypatch):
    monkeypatch.setenv("DNDSPELLS_WORKERS", "8")
    config = ScrapeConfig.from_env(workers=2, delay=None)
    assert config.workers == 2
    assert config.delay == 0


def test_missing_database_id(monkeypatch):
    monkeypatch.setenv("NOTION_API_KEY", "secret_abc")
    with pytest.raises(ConfigError, match="NOTION_DATABASE_ID"):
        ScrapeConfig.from_env().require_notion()


def test_invalid_workers():
    with pytest.raises(ValidationError):
        ScrapeConfig(workers=0)
