"""Free-text location lookup via OpenStreetMap Nominatim."""

from __future__ import annotations

from typing import Any

from ..errors.internal import ParsingError
from ..store.models import LocationRecord
from .http_client import HTTPClient

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
CITY_KEYS = ("city", "town", "village", "hamlet")


def parse_geocode(query: str, payload: Any) -> LocationRecord | None:
    """Turn a Nominatim search response into a LocationRecord.

    Returns ``None`` when nothing matched. Raises ``ParsingError`` when the
    payload does not have the expected shape.
    """
    if not isinstance(payload, list):
        raise ParsingError(f"Unexpected geocode payload for {query!r}")
    if not payload:
        return None
    first = payload[0]
    try:
        address = first.get("address") or {}
        city = next((address[k] for k in CITY_KEYS if address.get(k)), None)
        country = address.get("country") or first["display_name"].split(",")[-1].strip()
        return LocationRecord(
            query=query,
            latitude=str(first["lat"]),
            longitude=str(first["lon"]),
            country=country,
            city=city,
        )
    except (KeyError, AttributeError, TypeError) as e:
        raise ParsingError(f"Malformed geocode result for {query!r}: {e}") from e


async def geocode(http: HTTPClient, query: str) -> LocationRecord | None:
    payload = await http.get_json(
        NOMINATIM_URL,
        "geocode",
        params={"q": query, "format": "json", "addressdetails": "1", "limit": "1"},
    )
    return parse_geocode(query, payload)
