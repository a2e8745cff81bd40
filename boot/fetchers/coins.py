"""Cryptocurrency price history and sparkline rendering (Kraken public API)."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from ..errors.internal import ParsingError
from ..utils.helpers import format_price
from .http_client import HTTPClient

KRAKEN_OHLC_URL = "https://api.kraken.com/0/public/OHLC"
KRAKEN_TICKER_URL = "https://api.kraken.com/0/public/Ticker"

SPARK_GLYPHS = "▁▂▃▄▅▆▇█"
GREEN = "\x0303"
RED = "\x0304"
RESET = "\x0f"
EMPTY_PRICE = 0.001

DAY = 86400

COIN_PAIRS: dict[str, str] = {
    "btc": "XBTUSD",
    "eth": "ETHUSD",
    "ltc": "LTCUSD",
    "xmr": "XMRUSD",
    "doge": "XDGUSD",
    "xrp": "XRPUSD",
    "sol": "SOLUSD",
    "ada": "ADAUSD",
    "bch": "BCHUSD",
}


@dataclass(frozen=True, slots=True)
class Timeframe:
    interval_minutes: int
    span_seconds: int
    step: int


TIMEFRAMES: dict[str, Timeframe] = {
    "1d": Timeframe(15, DAY, 4),
    "7d": Timeframe(60, 7 * DAY, 7),
    "14d": Timeframe(240, 14 * DAY, 3),
    "31d": Timeframe(240, 31 * DAY, 7),
    "1y": Timeframe(1440, 365 * DAY, 14),
    "3y": Timeframe(10080, 3 * 365 * DAY, 6),
    "5y": Timeframe(10080, 5 * 365 * DAY, 10),
}


@dataclass(frozen=True, slots=True)
class Candle:
    time: int
    open: float
    close: float


@dataclass(slots=True)
class PriceSummary:
    symbol: str
    timeframe: str
    initial: float
    initial_time: int
    spot: float
    spot_time: int
    high: float
    high_time: int
    low: float
    low_time: int
    mean: float
    series: list[float] = field(default_factory=list)

    def graph_line(self) -> str:
        return (
            f"{self.symbol.upper()} {self.timeframe}: {format_price(self.initial)} "
            f"({_stamp(self.initial_time)}) {graph(self.initial, self.series, True)} "
            f"{format_price(self.spot)} ({_stamp(self.spot_time)})"
        )

    def stats_line(self) -> str:
        return (
            f"High: {format_price(self.high)} ({_stamp(self.high_time)}) "
            f"Mean: {format_price(self.mean)} "
            f"Low: {format_price(self.low)} ({_stamp(self.low_time)})"
        )


def _stamp(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, UTC).strftime("%Y-%m-%d %H:%M")


def graph(initial: float, prices: list[float], colour: bool) -> str:
    """Render ``prices`` as an 8-level sparkline.

    Each glyph is green when its price rose against the previous one (the
    first compares against ``initial``) and red otherwise. Prices at or
    below ``EMPTY_PRICE`` render as a blank.
    """
    if not prices:
        return ""
    valid = [p for p in prices if p > EMPTY_PRICE]
    low, high = (min(valid), max(valid)) if valid else (0.0, 0.0)
    ratio = 1.0 if high == low else (len(SPARK_GLYPHS) - 1) / (high - low)
    out: list[str] = []
    previous = initial
    for price in prices:
        if price <= EMPTY_PRICE:
            glyph = " "
        else:
            level = math.floor((price - low) * ratio + 0.5)
            glyph = SPARK_GLYPHS[min(max(level, 0), len(SPARK_GLYPHS) - 1)]
        if colour:
            out.append(GREEN if price > previous else RED)
        out.append(glyph)
        previous = price
    if colour:
        out.append(RESET)
    return "".join(out)


def summarize(
    symbol: str, timeframe: str, candles: list[Candle], spot: float, spot_time: int
) -> PriceSummary:
    """Compute the summary statistics for a candle series plus the spot price."""
    if not candles:
        raise ParsingError(f"No price history for {symbol} {timeframe}")
    closes = [c.close for c in candles]
    high = max(candles, key=lambda c: c.close)
    low = min(candles, key=lambda c: c.close)
    step = TIMEFRAMES[timeframe].step if timeframe in TIMEFRAMES else 1
    return PriceSummary(
        symbol=symbol,
        timeframe=timeframe,
        initial=candles[0].open,
        initial_time=candles[0].time,
        spot=spot,
        spot_time=spot_time,
        high=high.close,
        high_time=high.time,
        low=low.close,
        low_time=low.time,
        mean=(sum(closes) + spot) / (len(closes) + 1),
        series=closes[::step],
    )


def _kraken_result(payload: Any, context: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ParsingError(f"Unexpected {context} payload")
    if payload.get("error"):
        raise ParsingError(f"{context} rejected: {', '.join(payload['error'])}")
    result = payload.get("result")
    if not isinstance(result, dict):
        raise ParsingError(f"{context} payload has no result")
    for key, value in result.items():
        if key != "last":
            return {"key": key, "value": value}
    raise ParsingError(f"{context} payload has no pair data")


def parse_candles(payload: Any) -> list[Candle]:
    rows = _kraken_result(payload, "OHLC")["value"]
    try:
        return [Candle(int(r[0]), float(r[1]), float(r[4])) for r in rows]
    except (IndexError, TypeError, ValueError) as e:
        raise ParsingError(f"Malformed OHLC row: {e}") from e


def parse_spot(payload: Any) -> float:
    ticker = _kraken_result(payload, "Ticker")["value"]
    try:
        return float(ticker["c"][0])
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise ParsingError(f"Malformed ticker: {e}") from e


async def fetch_coin_series(http: HTTPClient, symbol: str, timeframe: str) -> PriceSummary:
    pair = COIN_PAIRS.get(symbol)
    frame = TIMEFRAMES.get(timeframe)
    if pair is None or frame is None:
        raise ParsingError(f"Unsupported coin request {symbol} {timeframe}")
    now = int(time.time())
    ohlc = await http.get_json(
        KRAKEN_OHLC_URL,
        f"{symbol} price history",
        params={
            "pair": pair,
            "interval": str(frame.interval_minutes),
            "since": str(now - frame.span_seconds),
        },
    )
    ticker = await http.get_json(KRAKEN_TICKER_URL, f"{symbol} spot price", params={"pair": pair})
    return summarize(symbol, timeframe, parse_candles(ohlc), parse_spot(ticker), now)
