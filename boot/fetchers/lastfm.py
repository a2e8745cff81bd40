"""Most recent scrobble from a public last.fm profile page."""

from __future__ import annotations

from urllib.parse import quote

from bs4 import BeautifulSoup

from ..errors.handling import log_error
from ..errors.internal import InternalError
from .http_client import HTTPClient

LASTFM_USER_URL = "https://www.last.fm/user/{user}"
LASTFM_MAX_BYTES = 1024 * 1024
NOW_SCROBBLING_CLASS = "chartlist-row--now-scrobbling"


def parse_recent(html: str, user: str) -> str | None:
    """Describe the top row of the recent tracks table, or ``None`` if absent."""
    soup = BeautifulSoup(html, "html.parser")
    row = soup.select_one("tr.chartlist-row")
    if row is None:
        return None
    track = row.select_one("td.chartlist-name a")
    artist = row.select_one("td.chartlist-artist a")
    if track is None or artist is None:
        return None
    song = f"{artist.get_text(strip=True)} - {track.get_text(strip=True)}"
    if NOW_SCROBBLING_CLASS in (row.get("class") or []):
        return f"{user} is now playing: {song}"
    stamp = row.select_one("td.chartlist-timestamp span")
    when = " ".join(stamp.get_text().split()) if stamp else ""
    if not when:
        return f"{user} last played: {song}"
    return f"{user} last played: {song} ({when})"


async def fetch_lastfm(http: HTTPClient, user: str) -> str | None:
    url = LASTFM_USER_URL.format(user=quote(user, safe=""))
    try:
        html = await http.get_text(url, LASTFM_MAX_BYTES)
    except InternalError as e:
        log_error(f"last.fm fetch failed for {user}", e)
        return None
    return parse_recent(html, user) if html else None
