"""Page title extraction for links pasted into channels."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from ..constants import TITLE_MAX_BYTES
from ..errors.handling import log_error
from ..errors.internal import InternalError
from .http_client import HTTPClient

# Sites whose <title> is a fixed placeholder; their og:title is the real one
GENERIC_TITLES = frozenset({"YouTube", "Pleroma"})


def extract_title(html: str) -> str | None:
    """Pick the best title from an HTML document.

    ``<title>`` text is whitespace-collapsed. When it is a known generic
    placeholder the ``og:title`` meta content is used instead (or nothing
    when the page has none).
    """
    soup = BeautifulSoup(html, "html.parser")
    title: str | None = None
    if soup.title and soup.title.string:
        title = " ".join(soup.title.string.split()) or None
    og_title: str | None = None
    og_tag = soup.find("meta", attrs={"property": "og:title"})
    if og_tag and og_tag.get("content"):
        og_title = " ".join(str(og_tag["content"]).split()) or None
    if title in GENERIC_TITLES:
        return og_title
    return title


async def fetch_title(http: HTTPClient, url: str) -> str | None:
    """Fetch ``url`` and return its title. Never raises."""
    try:
        html = await http.get_text(url, TITLE_MAX_BYTES)
    except InternalError as e:
        log_error(f"Title fetch failed for {url}", e)
        return None
    if html is None:
        return None
    title = extract_title(html)
    if title is None:
        logging.debug(f"No title found at {url}")
    return title
