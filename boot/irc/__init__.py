"""Minimal IRC transport."""

from .client import IRCClient, sanitize
from .parser import IRCMessage, build_event, parse_irc_message

__all__ = ["IRCClient", "IRCMessage", "build_event", "parse_irc_message", "sanitize"]
