from __future__ import annotations

from boot.bot.models import Event, EventKind
from boot.irc.parser import build_event, parse_irc_message


def test_parse_tags_prefix_params_and_trailing():
    msg = parse_irc_message("@time=2024;id :nick!u@h PRIVMSG #room :Hello there :)\r\n")
    assert msg.tags == {"time": "2024", "id": ""}
    assert msg.prefix == "nick!u@h"
    assert msg.nick == "nick"
    assert msg.command == "PRIVMSG"
    assert msg.params == ["#room"]
    assert msg.trailing == "Hello there :)"


def test_parse_without_prefix():
    msg = parse_irc_message("PING :irc.example.net")
    assert msg.prefix is None
    assert msg.command == "PING"
    assert msg.args == ["irc.example.net"]


def test_parse_numeric():
    msg = parse_irc_message(":server 001 boot_ :Welcome")
    assert msg.command == "001"
    assert msg.params == ["boot_"]


def test_parse_malformed_prefix_only():
    msg = parse_irc_message(":nick!user@host")
    assert msg.command is None
    assert msg.raw == ":nick!user@host"


def test_channel_privmsg_event():
    event = build_event(parse_irc_message(":alice!a@h PRIVMSG #chan :.btc"), "boot")
    assert event == Event("boot", "alice", "#chan", ".btc", EventKind.MESSAGE)
    assert event.is_channel


def test_private_message_replies_to_sender():
    event = build_event(parse_irc_message(":alice!a@h PRIVMSG Boot :hi"), "boot")
    assert event.target == "alice"
    assert not event.is_channel


def test_kick_invite_quit():
    kick = build_event(parse_irc_message(":op!o@h KICK #chan bob :spam"), "boot")
    assert kick == Event("boot", "op", "bob", "#chan", EventKind.KICK)
    invite = build_event(parse_irc_message(":op!o@h INVITE boot :#other"), "boot")
    assert invite == Event("boot", "op", "boot", "#other", EventKind.INVITE)
    quit_ = build_event(parse_irc_message(":carol!c@h QUIT :Ping timeout"), "boot")
    assert quit_ == Event("boot", "carol", "carol", "Ping timeout", EventKind.QUIT)


def test_other_commands_are_not_events():
    assert build_event(parse_irc_message("PING :x"), "boot") is None
    assert build_event(parse_irc_message(":alice!a@h JOIN #chan"), "boot") is None
    assert build_event(parse_irc_message(":alice!a@h PRIVMSG #chan"), "boot") is None
