"""Current conditions from OpenWeatherMap."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from ..errors.internal import ParsingError
from .http_client import HTTPClient

OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


@dataclass(slots=True)
class WeatherReport:
    name: str
    country: str
    description: str
    condition_id: int
    temperature_c: float
    humidity: int
    wind_ms: float
    gust_ms: float | None
    cloud_cover: int
    sunrise: int  # unix seconds
    sunset: int
    utc_offset: int  # seconds east of UTC

    @classmethod
    def from_payload(cls, payload: Any) -> WeatherReport:
        try:
            condition = payload["weather"][0]
            wind = payload.get("wind", {})
            return cls(
                name=payload["name"],
                country=payload["sys"].get("country", ""),
                description=condition["description"],
                condition_id=int(condition["id"]),
                temperature_c=float(payload["main"]["temp"]),
                humidity=int(payload["main"]["humidity"]),
                wind_ms=float(wind.get("speed", 0.0)),
                gust_ms=float(wind["gust"]) if "gust" in wind else None,
                cloud_cover=int(payload.get("clouds", {}).get("all", 0)),
                sunrise=int(payload["sys"]["sunrise"]),
                sunset=int(payload["sys"]["sunset"]),
                utc_offset=int(payload.get("timezone", 0)),
            )
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise ParsingError(f"Malformed weather payload: {e}") from e


def _speed(ms: float) -> str:
    return f"{ms * 3.6:.1f} km/h ({ms * 2.236936:.1f} mph)"


def _local_clock(timestamp: int, offset: int) -> str:
    moment = datetime.fromtimestamp(timestamp, UTC) + timedelta(seconds=offset)
    return moment.strftime("%H:%M")


def format_weather(report: WeatherReport) -> str:
    fahrenheit = report.temperature_c * 9 / 5 + 32
    place = f"{report.name}, {report.country}" if report.country else report.name
    text = (
        f"{place}: {report.description}, {report.temperature_c:.1f}°C ({fahrenheit:.1f}°F), "
        f"humidity {report.humidity}%, wind {_speed(report.wind_ms)}"
    )
    if report.gust_ms is not None:
        text += f" gusting to {_speed(report.gust_ms)}"
    if 801 <= report.condition_id <= 804:
        text += f", cloud cover {report.cloud_cover}%"
    return (
        f"{text}, sunrise {_local_clock(report.sunrise, report.utc_offset)}, "
        f"sunset {_local_clock(report.sunset, report.utc_offset)}"
    )


async def fetch_weather(
    http: HTTPClient, latitude: str, longitude: str, api_key: str
) -> WeatherReport:
    payload = await http.get_json(
        OPENWEATHER_URL,
        "weather lookup",
        params={"lat": latitude, "lon": longitude, "appid": api_key, "units": "metric"},
    )
    return WeatherReport.from_payload(payload)
