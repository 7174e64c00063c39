"""Persist parsed spells to a Notion database (or JSON files for dry runs)."""

import json
import re
from abc import ABC, abstractmethod
from pathlib import Path

import httpx

from .config import ScrapeConfig
from .models import SpellRecord

NOTION_API_URL = "https://api.notion.com/v1"

# Notion rejects rich text blocks longer than this
MAX_BLOCK_LENGTH = 2000

HEADER_LABELS = (
    ("Casting Time: ", "casting_time"),
    ("Range: ", "range"),
    ("Components: ", "components"),
    ("Duration: ", "duration"),
)


class StoreError(Exception):
    """Raised when a record can't be looked up or written."""


class SpellStore(ABC):
    """Destination for parsed spells."""

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Check if a spell with this name is already stored."""

    @abstractmethod
    def store(self, record: SpellRecord) -> None:
        """Write a spell record."""


def chunk_text(text: str, limit: int = MAX_BLOCK_LENGTH) -> list[str]:
    """Split text into pieces of at most `limit` characters.

    Each line is chunked on its own; empty lines produce no piece.
    """
    return re.findall(rf".{{1,{limit}}}", text)


def slugify(name: str) -> str:
    """Convert a spell name to a safe filename (e.g., "Tasha's Hideous Laughter" -> "tasha-s-hideous-laughter")."""
    return "-".join("".join(c if c.isalnum() else " " for c in name.lower()).split())


def _paragraph(*parts: tuple[str, dict]) -> dict:
    """Build a Notion paragraph block from (content, annotations) parts."""
    rich_text = []
    for content, annotations in parts:
        item: dict = {"text": {"content": content}}
        if annotations:
            item["annotations"] = annotations
        rich_text.append(item)
    return {"object": "block", "type": "paragraph", "paragraph": {"rich_text": rich_text}}


def build_page_payload(record: SpellRecord, database_id: str) -> dict:
    """Build the Notion 'create page' request body for a spell.

    Args:
        record: Parsed spell
        database_id: Target Notion database

    Returns:
        JSON-serializable request body
    """
    children = [
        _paragraph((label, {"bold": True}), (getattr(record, attr), {}))
        for label, attr in HEADER_LABELS
    ]
    children.extend(_paragraph((piece, {})) for piece in chunk_text(record.description))

    if record.higher_level:
        children.append(
            _paragraph(("At Higher Levels. ", {"bold": True, "italic": True}), (record.higher_level, {}))
        )
    else:
        children.append(_paragraph(("", {})))

    return {
        "parent": {"database_id": database_id},
        "properties": {
            "title": {"title": [{"text": {"content": record.name}}]},
            "Level": {"type": "select", "select": {"name": record.level}},
            "Classes": {"type": "multi_select", "multi_select": [{"name": c} for c in record.classes]},
            "School": {"type": "select", "select": {"name": record.school}},
        },
        "children": children,
    }


class NotionStore(SpellStore):
    """Spell store backed by a Notion database via the REST API."""

    def __init__(self, config: ScrapeConfig, client: httpx.Client | None = None):
        """Initialize store.

        Args:
            config: Scrape config with Notion credentials
            client: httpx client to use (one is created if None)

        Raises:
            ConfigError: If Notion credentials are missing
        """
        api_key, self.database_id = config.require_notion()
        self.client = client or httpx.Client(timeout=30)
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Notion-Version": config.notion_version,
            "Content-Type": "application/json",
        }

    def _post(self, path: str, payload: dict) -> dict:
        try:
            response = self.client.post(f"{NOTION_API_URL}{path}", json=payload, headers=self.headers)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise StoreError(f"Notion HTTP {e.response.status_code} for {path}: {e.response.text[:200]}") from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise StoreError(f"Notion request failed for {path}: {e}") from e
        except ValueError as e:
            raise StoreError(f"Notion returned invalid JSON for {path}: {e}") from e

    def exists(self, name: str) -> bool:
        data = self._post(
            f"/databases/{self.database_id}/query",
            {"filter": {"property": "title", "title": {"equals": name}}},
        )
        return bool(data.get("results"))

    def store(self, record: SpellRecord) -> None:
        self._post("/pages", build_page_payload(record, self.database_id))

    def close(self) -> None:
        self.client.close()


class JsonStore(SpellStore):
    """Spell store writing one JSON file per spell (used for dry runs)."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir

    def path_for(self, name: str) -> Path:
        return self.output_dir / f"{slugify(name)}.json"

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def store(self, record: SpellRecord) -> None:
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.path_for(record.name).write_text(json.dumps(record.to_json_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Failed to write {record.name}: {e}") from e
