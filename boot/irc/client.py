"""Minimal asyncio IRC client: register, join, forward events, send replies."""

from __future__ import annotations

import asyncio
import logging
import re

from ..bot.runner import BotRunner
from ..bot.sink import ReplySink
from ..config.model import BotConfig
from ..constants import IRC_CONNECT_TIMEOUT, IRC_READ_LIMIT
from ..logs.logger import logger
from .parser import IRCMessage, build_event, parse_irc_message

_LINE_BREAKS = re.compile(r"[\r\n]+")


def sanitize(text: str) -> str:
    """Collapse CR/LF so one reply can never become several protocol lines."""
    return _LINE_BREAKS.sub(" ", text).strip()


class IRCClient:
    def __init__(self, config: BotConfig, runner: BotRunner, sink: ReplySink) -> None:
        self.config = config
        self.runner = runner
        self.sink = sink
        self.nickname = config.nickname
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None
        self.registered = False
        self.joined_channels: set[str] = set()

    @property
    def connected(self) -> bool:
        return self.writer is not None and not self.writer.is_closing()

    async def connect(self) -> None:
        logger.log_event(
            "irc", "connect_start", user=self.nickname, server=self.config.server, port=self.config.port
        )
        self.reader, self.writer = await asyncio.wait_for(
            asyncio.open_connection(self.config.server, self.config.port, limit=IRC_READ_LIMIT),
            timeout=IRC_CONNECT_TIMEOUT,
        )
        await self.send_line(f"NICK {self.nickname}")
        await self.send_line(f"USER {self.config.username} 0 * :{self.config.realname}")

    async def send_line(self, line: str) -> None:
        if not self.writer:
            return
        self.writer.write(f"{line}\r\n".encode())
        await self.writer.drain()
        logging.debug(f">> {line}")

    async def send_privmsg(self, target: str, text: str) -> None:
        await self.send_line(f"PRIVMSG {target} :{sanitize(text)}")

    async def join(self, channel: str) -> None:
        await self.send_line(f"JOIN {channel}")

    async def run(self) -> None:
        """Connect, then pump lines in and replies out until the server goes away."""
        await self.connect()
        writer_task = asyncio.create_task(self.write_replies(), name="irc-writer")
        try:
            await self.listen()
        finally:
            writer_task.cancel()
            await asyncio.gather(writer_task, return_exceptions=True)
            await self.disconnect()

    async def listen(self) -> None:
        if self.reader is None:
            raise ConnectionError("listen() called before connect()")
        while True:
            try:
                raw = await self.reader.readline()
            except ValueError:
                # line longer than IRC_READ_LIMIT; the reader has already discarded it
                logger.log_event("irc", "line_too_long", logging.WARNING, user=self.nickname)
                continue
            if not raw:
                logger.log_event("irc", "connection_closed", logging.WARNING, user=self.nickname)
                return
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            if not line:
                continue
            logging.debug(f"<< {line}")
            await self.handle_line(line)

    async def handle_line(self, line: str) -> None:
        message = parse_irc_message(line)
        command = message.command
        if command == "PING":
            await self.send_line(f"PONG :{message.trailing or ''}")
        elif command == "001":
            await self._on_welcome(message)
        elif command == "433":
            self.nickname = f"{self.nickname}_"
            logger.log_event("irc", "nick_in_use", logging.WARNING, user=self.nickname)
            await self.send_line(f"NICK {self.nickname}")
        elif command == "JOIN" and message.nick and message.nick.lower() == self.nickname.lower():
            channel = message.args[0].lower() if message.args else ""
            self.joined_channels.add(channel)
            logger.log_event("irc", "joined", user=self.nickname, channel=channel)
        elif command == "NICK" and message.nick and message.nick.lower() == self.nickname.lower():
            if message.args:
                self.nickname = message.args[0]
                logger.log_event("irc", "nick_changed", user=self.nickname)
        elif command == "INVITE" and len(message.args) >= 2:
            channel = message.args[1].lower()
            if channel in self.config.channels:
                await self.join(channel)
        event = build_event(message, self.nickname)
        if event is not None:
            self.runner.submit(event)

    async def _on_welcome(self, message: IRCMessage) -> None:
        if message.params:
            self.nickname = message.params[0]
        self.registered = True
        logger.log_event("irc", "registered", user=self.nickname, server=self.config.server)
        for channel in self.config.channels:
            await self.join(channel)

    async def write_replies(self) -> None:
        async for reply in self.sink:
            await self.send_privmsg(reply.target, reply.text)

    async def disconnect(self) -> None:
        self.registered = False
        self.joined_channels.clear()
        if not self.writer:
            return
        try:
            self.writer.close()
            await self.writer.wait_closed()
        except OSError as e:
            logger.log_event("irc", "close_error", logging.ERROR, user=self.nickname, error=str(e))
        finally:
            self.writer = None
            self.reader = None
        logger.log_event("irc", "disconnected", logging.WARNING, user=self.nickname)
