"""General utility helper functions."""

from __future__ import annotations

import re
from datetime import UTC, datetime

__all__ = ["extract_links", "format_price", "humanize_past", "utc_now"]

_LINK_PATTERN = re.compile(r"https?://[^\s<>\"']+", re.IGNORECASE)
# Punctuation that usually closes a sentence rather than a URL
_TRAILING = ".,;:!?)]}'\""


def utc_now() -> datetime:
    return datetime.now(UTC)


def humanize_past(total_seconds: int | float) -> str:
    """Return a rough, past-tense description of an elapsed duration.

    Examples:
      10 -> "now"
      60 -> "a minute ago"
      600 -> "10 minutes ago"
      7200 -> "2 hours ago"
      100000 -> "a day ago"
    """
    seconds = max(0, int(total_seconds))
    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24
    if seconds < 45:
        return "now"
    if seconds < 90:
        return "a minute ago"
    if minutes < 45:
        return f"{round(minutes)} minutes ago"
    if minutes < 90:
        return "an hour ago"
    if hours < 22:
        return f"{round(hours)} hours ago"
    if hours < 36:
        return "a day ago"
    if days < 7:
        return f"{round(days)} days ago"
    if days < 11:
        return "a week ago"
    if days < 30:
        return f"{round(days / 7)} weeks ago"
    if days < 45:
        return "a month ago"
    if days < 320:
        return f"{round(days / 30)} months ago"
    if days < 548:
        return "a year ago"
    return f"{round(days / 365)} years ago"


def extract_links(text: str) -> list[str]:
    """Return the http(s) URLs in ``text`` in order of appearance, deduplicated."""
    links: list[str] = []
    for match in _LINK_PATTERN.finditer(text):
        url = match.group(0).rstrip(_TRAILING)
        if url and url not in links:
            links.append(url)
    return links


def format_price(value: float) -> str:
    """Dollar amount with cents, or four decimals for sub-dollar coins."""
    if abs(value) < 1:
        return f"${value:.4f}"
    return f"${value:,.2f}"
