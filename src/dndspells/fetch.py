"""Fetch spell pages from the dnd5e wikidot wiki."""

import httpx
from bs4 import BeautifulSoup

from .config import DEFAULT_BASE_URL


class FetchError(Exception):
    """Raised when a page fetch fails or the page has no spell content."""


def fetch_html(url: str, client: httpx.Client | None = None, timeout: int = 30) -> str:
    """Fetch HTML from URL.

    Args:
        url: URL to fetch
        client: Shared httpx client (a one-off request is made if None)
        timeout: Request timeout in seconds

    Returns:
        HTML content as string

    Raises:
        FetchError: If request fails or returns non-200 status
    """
    try:
        if client is None:
            response = httpx.get(url, timeout=timeout, follow_redirects=True)
        else:
            response = client.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
        return response.text
    except httpx.HTTPStatusError as e:
        raise FetchError(f"HTTP {e.response.status_code} for {url}") from e
    except (httpx.RequestError, httpx.InvalidURL) as e:
        raise FetchError(f"Request failed for {url}: {e}") from e


def spell_url(identifier: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Build the page URL for a spell identifier (e.g., 'fireball')."""
    return f"{base_url.rstrip('/')}/spell:{identifier}"


def extract_page_text(html: str) -> str:
    """Extract the title and page content text from a spell page.

    Args:
        html: Full page HTML

    Returns:
        Title line followed by the trimmed page content text

    Raises:
        FetchError: If the title or #page-content element is missing
    """
    soup = BeautifulSoup(html, "html.parser")

    title = soup.find(class_="page-title page-header")
    if title is None:
        title = soup.select_one(".page-title.page-header")
    if title is None:
        raise FetchError("No page title found")

    content = soup.find(id="page-content")
    if content is None:
        raise FetchError("No #page-content found")

    return title.get_text() + "\n" + content.get_text().strip()


def fetch_spell_text(
    identifier: str, client: httpx.Client | None = None, base_url: str = DEFAULT_BASE_URL
) -> str:
    """Fetch the text of a single spell page.

    Args:
        identifier: Wiki page identifier (the part after 'spell:')
        client: Shared httpx client
        base_url: Wiki root URL

    Returns:
        Page text ready for parse.extract_spell

    Raises:
        FetchError: If fetching or extraction fails
    """
    url = spell_url(identifier, base_url)
    try:
        return extract_page_text(fetch_html(url, client))
    except FetchError as e:
        raise FetchError(f"{identifier}: {e}") from e
