"""Runtime configuration for the scraper.

Values come from the environment (or a .env file). The config object is
passed explicitly to the fetcher, store and pipeline.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "http://dnd5e.wikidot.com"
DEFAULT_NOTION_VERSION = "2022-06-28"


class ConfigError(Exception):
    """Raised when required configuration is missing."""


class ScrapeConfig(BaseModel):
    """Settings for a scrape run."""

    notion_api_key: str | None = None
    notion_database_id: str | None = None
    notion_version: str = DEFAULT_NOTION_VERSION
    base_url: str = DEFAULT_BASE_URL
    workers: int = Field(default=4, ge=1, description="Max spells processed concurrently")
    delay: float = Field(default=0.0, ge=0, description="Pause after each spell, in seconds")
    log_dir: Path = Path("data/logs")

    @classmethod
    def from_env(cls, **overrides) -> "ScrapeConfig":
        """Build config from environment variables and .env file.

        Args:
            overrides: Values that take precedence over the environment (None is ignored)

        Returns:
            ScrapeConfig
        """
        load_dotenv()

        values: dict = {
            # API_KEY / DATABASE_ID are accepted for older .env files
            "notion_api_key": os.getenv("NOTION_API_KEY") or os.getenv("API_KEY"),
            "notion_database_id": os.getenv("NOTION_DATABASE_ID") or os.getenv("DATABASE_ID"),
        }
        if base_url := os.getenv("DNDSPELLS_BASE_URL"):
            values["base_url"] = base_url
        if workers := os.getenv("DNDSPELLS_WORKERS"):
            values["workers"] = workers
        if delay := os.getenv("DNDSPELLS_DELAY"):
            values["delay"] = delay

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def require_notion(self) -> tuple[str, str]:
        """Return (api_key, database_id), failing if either is unset.

        Raises:
            ConfigError: If Notion credentials are missing
        """
        if not self.notion_api_key:
            raise ConfigError("NOTION_API_KEY not set. Set it in .env file or export NOTION_API_KEY=...")
        if not self.notion_database_id:
            raise ConfigError("NOTION_DATABASE_ID not set. Set it in .env file or export NOTION_DATABASE_ID=...")
        return self.notion_api_key, self.notion_database_id
