"""Shared fixtures: spell page text, page HTML and mocked HTTP clients."""

import json

import httpx
import pytest

from dndspells.config import ScrapeConfig

FIREBALL_TEXT = "\n".join(
    [
        "Fireball",
        "Source: Player's Handbook",
        "3rd-level evocation",
        "Casting Time: 1 action",
        "Range: 150 feet",
        "Components: V, S, M (a tiny ball of bat guano and sulfur)",
        "Duration: Instantaneous",
        "A bright streak flashes from your pointing finger to a point you choose within range.",
        "The fire spreads around corners.",
        "At Higher Levels. When you cast this spell using a spell slot of 4th level or higher, "
        "the damage increases by 1d6 for each slot level above 3rd.",
        "Spell Lists. Sorcerer, Wizard",
    ]
)

FIRE_BOLT_TEXT = "\n".join(
    [
        "Fire Bolt",
        "Source: Player's Handbook",
        "Evocation cantrip",
        "Casting Time: 1 action",
        "Range: 120 feet",
        "Components: V, S",
        "Duration: Instantaneous",
        "You hurl a mote of fire at a creature or object within range.",
        "This spell's damage increases by 1d10 when you reach 5th level (2d10).",
        "Spell Lists. Artificer, Sorcerer, Wizard",
    ]
)

LISTING_HTML = """
<html><body>
<div class="list-pages-box"><table>
<tr><td><a href="/spell:fire-bolt">Fire Bolt</a></td></tr>
<tr><td><a href="/spell:light">Light</a></td></tr>
</table></div>
<div class="list-pages-box"><table>
<tr><td><a href="/spell:fireball">Fireball</a></td></tr>
<tr><td><a href="/spell:fire-bolt">Fire Bolt</a></td></tr>
<tr><td><a href="/spells">Back</a></td></tr>
</table></div>
<div class="side-bar"><a href="/spell:not-in-listing">Elsewhere</a></div>
</body></html>
"""


def page_html(text: str) -> str:
    """Render spell text the way wikidot lays out a spell page."""
    title, *content = text.split("\n")
    paragraphs = "\n".join(f"<p>{line}</p>" for line in content)
    return (
        "<html><body>"
        f'<div class="page-title page-header"><span>{title}</span></div>'
        f'<div id="page-content">\n{paragraphs}\n</div>'
        "</body></html>"
    )


class FakeNotion:
    """In-memory stand-in for the Notion API endpoints the store uses."""

    def __init__(self, existing: set[str] | None = None, fail_pages: bool = False):
        self.existing = set(existing or ())
        self.fail_pages = fail_pages
        self.created: list[dict] = []
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = json.loads(request.content)
        if request.url.path.endswith("/query"):
            name = body["filter"]["title"]["equals"]
            results = [{"object": "page", "id": name}] if name in self.existing else []
            return httpx.Response(200, json={"object": "list", "results": results})
        if request.url.path == "/v1/pages":
            if self.fail_pages:
                return httpx.Response(400, json={"message": "validation_error"})
            self.created.append(body)
            self.existing.add(body["properties"]["title"]["title"][0]["text"]["content"])
            return httpx.Response(200, json={"object": "page", "id": "new"})
        return httpx.Response(404)


def mock_client(pages: dict[str, str], notion: FakeNotion | None = None) -> httpx.Client:
    """httpx client serving wiki pages by path, and Notion calls from a FakeNotion."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.notion.com" and notion is not None:
            return notion.handle(request)
        if request.url.path in pages:
            return httpx.Response(200, text=pages[request.url.path])
        return httpx.Response(404, text="not found")

    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def fireball_text() -> str:
    return FIREBALL_TEXT


@pytest.fixture
def fire_bolt_text() -> str:
    return FIRE_BOLT_TEXT


@pytest.fixture
def config(tmp_path) -> ScrapeConfig:
    return ScrapeConfig(
        notion_api_key="secret_test",
        notion_database_id="db123",
        log_dir=tmp_path / "logs",
        workers=2,
    )
