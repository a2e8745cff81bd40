"""Turn raw message text into a typed Command.

``classify`` is pure and total: anything it does not recognize becomes
``IGNORE``. Addressing forms are ``./cmd``, ``.cmd``, ``!cmd`` and
``<nick>[:|,] cmd``.
"""

from __future__ import annotations

import re

from .models import (
    IGNORE,
    Coins,
    Command,
    HangGuess,
    HangStart,
    Lastfm,
    Location,
    PlainReply,
    Seen,
    Tell,
    Weather,
)

REPO_URL = "https://github.com/niall-/boot"
HELP_TEXT = (
    "Commands: help | repo | seen <nick> | tell <nick> <message> | weather [location] | "
    "loc <location> | <coin> [day|week|fortnight|month|year|3y|5y] | lastfm <user> | "
    "hang [short|medium|long] | guess <letter|word>"
)
SEEN_HINT = "Hint: seen <nick>"
TELL_HINT = "Hint: tell <nick> <message>"
LOC_HINT = "Hint: loc <location>"
LASTFM_HINT = "noob"

COIN_ALIASES: dict[str, str] = {
    "btc": "btc",
    "bitcoin": "btc",
    "eth": "eth",
    "ethereum": "eth",
    "ltc": "ltc",
    "litecoin": "ltc",
    "xmr": "xmr",
    "monero": "xmr",
    "doge": "doge",
    "dogecoin": "doge",
    "xrp": "xrp",
    "ripple": "xrp",
    "bch": "bch",
    "sol": "sol",
    "solana": "sol",
    "ada": "ada",
    "cardano": "ada",
}

TIMEFRAME_ALIASES: dict[str, str] = {
    "day": "1d",
    "24h": "1d",
    "1d": "1d",
    "week": "7d",
    "7d": "7d",
    "fortnight": "14d",
    "14d": "14d",
    "month": "31d",
    "30d": "31d",
    "31d": "31d",
    "year": "1y",
    "1y": "1y",
    "365d": "1y",
    "3y": "3y",
    "5y": "5y",
}

DIFFICULTIES = frozenset({"short", "medium", "long"})

_TOKEN = re.compile(r"\S+")
_NICK_SUFFIXES = ("", ":", ",")


def _addresses_nick(token: str, own_nick: str) -> bool:
    lowered = token.lower()
    nick = own_nick.lower()
    return bool(nick) and lowered.startswith(nick) and lowered[len(nick):] in _NICK_SUFFIXES


def _split_command(own_nick: str, tokens: list[str]) -> tuple[str, int] | None:
    """Return ``(sub-command, index of first argument)`` if the bot is addressed."""
    first = tokens[0]
    if first.startswith("./") and len(first) > 2:
        return first[2:], 1
    if first[0] in ".!" and len(first) > 1:
        return first[1:], 1
    if _addresses_nick(first, own_nick):
        if len(tokens) < 2:
            return "help", 1
        return tokens[1], 2
    return None


def classify(own_nick: str, text: str, *, bare_guesses: bool = False) -> Command:
    matches = list(_TOKEN.finditer(text))
    if not matches:
        return IGNORE
    tokens = [m.group(0) for m in matches]

    split = _split_command(own_nick, tokens)
    if split is None:
        if bare_guesses and len(tokens) == 1 and re.fullmatch(r"[a-z]", tokens[0]):
            return HangGuess(tokens[0])
        return IGNORE
    command, start = split
    args = tokens[start:]

    def remainder(skip: int = 0) -> str:
        index = start + skip
        return text[matches[index].start():].strip() if index < len(matches) else ""

    if command in ("help", "man", "manual"):
        return PlainReply(HELP_TEXT)
    if command in ("repo", "git"):
        return PlainReply(REPO_URL)
    if command == "seen":
        return Seen(args[0]) if args else PlainReply(SEEN_HINT)
    if command == "tell":
        message = remainder(1)
        if not args or not message:
            return PlainReply(TELL_HINT)
        return Tell(args[0], message)
    if command == "weather":
        return Weather(remainder() or None)
    if command in ("loc", "location"):
        location = remainder()
        return Location(location) if location else PlainReply(LOC_HINT)
    if command == "lastfm":
        return Lastfm(args[0]) if args else PlainReply(LASTFM_HINT)
    if command == "hang":
        difficulty = args[0] if args and args[0] in DIFFICULTIES else ""
        return HangStart(difficulty)
    if command == "guess":
        return HangGuess(args[0].lower()) if args else IGNORE

    symbol = COIN_ALIASES.get(command.lower())
    if symbol is not None:
        timeframe = TIMEFRAME_ALIASES.get(args[0].lower(), "1d") if args else "1d"
        return Coins(symbol, timeframe)
    return IGNORE
