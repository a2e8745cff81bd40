"""Event and command value types shared by the runner, classifier and dispatcher."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class EventKind(Enum):
    MESSAGE = auto()
    KICK = auto()
    INVITE = auto()
    QUIT = auto()


@dataclass(frozen=True, slots=True)
class Event:
    """One normalized protocol event.

    For MESSAGE, ``target`` is where replies go (channel, or the sender for
    private messages). For KICK and INVITE, ``target`` is the affected nick
    and ``text`` the channel. For QUIT, ``target`` is the quitter and
    ``text`` the quit reason.
    """

    own_nickname: str
    source: str
    target: str
    text: str
    kind: EventKind = EventKind.MESSAGE

    @property
    def is_channel(self) -> bool:
        return self.target.startswith(("#", "&"))


@dataclass(frozen=True, slots=True)
class OutboundReply:
    target: str
    text: str


class Command:
    """Base class for classified commands."""

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class Ignore(Command):
    pass


@dataclass(frozen=True, slots=True)
class PlainReply(Command):
    text: str


@dataclass(frozen=True, slots=True)
class Seen(Command):
    nick: str


@dataclass(frozen=True, slots=True)
class Tell(Command):
    nick: str
    message: str


@dataclass(frozen=True, slots=True)
class Weather(Command):
    location: str | None = None


@dataclass(frozen=True, slots=True)
class Location(Command):
    location: str


@dataclass(frozen=True, slots=True)
class Coins(Command):
    symbol: str
    timeframe: str = "1d"


@dataclass(frozen=True, slots=True)
class Lastfm(Command):
    user: str


@dataclass(frozen=True, slots=True)
class HangStart(Command):
    # "" means the default (medium) length class
    difficulty: str = ""


@dataclass(frozen=True, slots=True)
class HangGuess(Command):
    guess: str


IGNORE = Ignore()
