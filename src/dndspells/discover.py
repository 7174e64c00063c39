"""Discover spell page identifiers from the wiki's spell listing."""

import httpx
from bs4 import BeautifulSoup
from rich.console import Console
from rich.table import Table

from .config import DEFAULT_BASE_URL
from .fetch import FetchError, fetch_html

console = Console()


def extract_spell_ids(html: str) -> list[str]:
    """Extract spell identifiers from the listing page.

    The listing has one .list-pages-box per spell level; each link points to
    'spell:<identifier>'.

    Args:
        html: Listing page HTML

    Returns:
        Identifiers in page order, without duplicates
    """
    soup = BeautifulSoup(html, "html.parser")

    ids: list[str] = []
    seen: set[str] = set()
    for box in soup.find_all(class_="list-pages-box"):
        for link in box.find_all("a"):
            parts = (link.get("href") or "").split(":")
            if len(parts) < 2 or not parts[1]:
                continue
            identifier = parts[1]
            if identifier not in seen:
                seen.add(identifier)
                ids.append(identifier)
    return ids


def fetch_spell_ids(client: httpx.Client | None = None, base_url: str = DEFAULT_BASE_URL) -> list[str]:
    """Fetch the spell listing and return all spell identifiers.

    Raises:
        FetchError: If the listing can't be fetched or has no spells
    """
    url = f"{base_url.rstrip('/')}/spells"
    ids = extract_spell_ids(fetch_html(url, client))
    if not ids:
        raise FetchError(f"No spell links found on {url}")

    console.print(f"[green]✓[/green] Found {len(ids)} spells on {url}")
    return ids


def display_ids_summary(ids: list[str]) -> None:
    """Display summary table of spell identifiers."""
    table = Table(title="Spell Pages")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Identifier", style="blue", overflow="fold")

    for i, identifier in enumerate(ids, 1):
        table.add_row(str(i), identifier)

    console.print(table)
    console.print(f"\n[green]Total spells: {len(ids)}[/green]")
