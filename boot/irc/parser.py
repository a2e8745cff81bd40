"""IRC line parsing and conversion into bot events."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..bot.models import Event, EventKind


@dataclass
class IRCMessage:
    raw: str
    prefix: str | None
    command: str | None
    params: list[str] = field(default_factory=list)
    trailing: str | None = None
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def nick(self) -> str | None:
        """Nickname portion of a ``nick!user@host`` prefix."""
        if not self.prefix:
            return None
        return self.prefix.split("!", 1)[0]

    @property
    def args(self) -> list[str]:
        """Middle params followed by the trailing param, if any."""
        return [*self.params, self.trailing] if self.trailing is not None else list(self.params)


def parse_irc_message(raw_line: str) -> IRCMessage:
    tags: dict[str, str] = {}
    prefix: str | None = None
    trailing: str | None = None

    original = raw_line
    line = raw_line.rstrip("\r\n")

    if line.startswith("@"):
        tags_part, _, line = line.partition(" ")
        tags = _parse_tags(tags_part[1:])

    if line.startswith(":"):
        # a prefix with nothing after it is malformed; keep it and leave the rest empty
        prefix, _, line = line[1:].partition(" ")

    if line.startswith(":"):
        line, trailing = "", line[1:]
    elif " :" in line:
        line, trailing = line.split(" :", 1)

    parts = line.split()
    command = parts[0].upper() if parts else None
    return IRCMessage(
        raw=original,
        prefix=prefix,
        command=command,
        params=parts[1:],
        trailing=trailing,
        tags=tags,
    )


def _parse_tags(raw_tags: str) -> dict[str, str]:
    tags: dict[str, str] = {}
    for tag in raw_tags.split(";"):
        k, _, v = tag.partition("=")
        if k:
            tags[k] = v
    return tags


def build_event(parsed: IRCMessage, own_nick: str) -> Event | None:
    """Translate PRIVMSG, KICK, INVITE and QUIT into an Event; ``None`` otherwise."""
    source = parsed.nick
    if not source:
        return None
    args = parsed.args
    if parsed.command == "PRIVMSG":
        if len(args) < 2:
            return None
        recipient, text = args[0], args[1]
        # private messages are answered in private
        target = source if recipient.lower() == own_nick.lower() else recipient
        return Event(own_nick, source, target, text, EventKind.MESSAGE)
    if parsed.command == "KICK":
        if len(args) < 2:
            return None
        return Event(own_nick, source, args[1], args[0], EventKind.KICK)
    if parsed.command == "INVITE":
        if len(args) < 2:
            return None
        return Event(own_nick, source, args[0], args[1], EventKind.INVITE)
    if parsed.command == "QUIT":
        return Event(own_nick, source, source, args[0] if args else "", EventKind.QUIT)
    return None
