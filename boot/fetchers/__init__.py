"""External data fetchers sharing one HTTP client."""

from __future__ import annotations

from ..store.models import LocationRecord
from .coins import PriceSummary, fetch_coin_series
from .geocode import geocode
from .http_client import HTTPClient, SessionConfig
from .lastfm import fetch_lastfm
from .titles import fetch_title
from .weather import WeatherReport, fetch_weather, format_weather


class Fetchers:
    """Bundle of fetch operations bound to a single HTTP client."""

    def __init__(self, http: HTTPClient) -> None:
        self.http = http

    async def fetch_title(self, url: str) -> str | None:
        return await fetch_title(self.http, url)

    async def geocode(self, query: str) -> LocationRecord | None:
        return await geocode(self.http, query)

    async def fetch_weather(self, latitude: str, longitude: str, api_key: str) -> WeatherReport:
        return await fetch_weather(self.http, latitude, longitude, api_key)

    async def fetch_coin_series(self, symbol: str, timeframe: str) -> PriceSummary:
        return await fetch_coin_series(self.http, symbol, timeframe)

    async def fetch_lastfm(self, user: str) -> str | None:
        return await fetch_lastfm(self.http, user)

    async def close(self) -> None:
        await self.http.close()


__all__ = [
    "Fetchers",
    "HTTPClient",
    "PriceSummary",
    "SessionConfig",
    "WeatherReport",
    "format_weather",
]
