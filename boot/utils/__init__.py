"""Utility functions package for the boot bot.

Exposed functions:
    humanize_past: Rough past-tense description of an elapsed duration.
    extract_links: http(s) URLs found in a chat line.
    format_price: Dollar formatting for coin prices.
    retry_async: Tenacity-backed retry for transient network failures.
"""

from .helpers import extract_links, format_price, humanize_past, utc_now
from .retry import retry_async

__all__ = ["extract_links", "format_price", "humanize_past", "retry_async", "utc_now"]
