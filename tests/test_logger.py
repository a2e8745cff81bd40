from __future__ import annotations

import logging

from boot.logs.event_catalog import load_event_templates
from boot.logs.logger import BotLogger


def test_template_rendering_concise(caplog, monkeypatch):
    monkeypatch.delenv("DEBUG", raising=False)
    log = BotLogger("boot.test")
    with caplog.at_level(logging.INFO, logger="boot.test"):
        log.log_event("notifications", "delivered", user="bob", channel="#chan", count=2)
    assert caplog.records[-1].getMessage() == f"[{'bob@#chan'.ljust(24)}] 📨 Delivered 2 notification(s)"


def test_unknown_event_is_derived(caplog, monkeypatch):
    monkeypatch.delenv("DEBUG", raising=False)
    log = BotLogger("boot.test")
    with caplog.at_level(logging.INFO, logger="boot.test"):
        log.log_event("some_domain", "did_thing")
    assert caplog.records[-1].getMessage().endswith("some domain: did thing")


def test_debug_mode_appends_context(caplog, monkeypatch):
    monkeypatch.setenv("DEBUG", "1")
    log = BotLogger("boot.test")
    with caplog.at_level(logging.DEBUG, logger="boot.test"):
        log.log_event("coins", "fetched", logging.DEBUG, symbol="btc", timeframe="1d")
    message = caplog.records[-1].getMessage()
    assert message.startswith("coins_fetched")
    assert "💰 Fetched btc 1d price history" in message
    assert message.endswith("(symbol=btc, timeframe=1d)")


def test_catalog_has_entries_for_every_domain():
    templates = load_event_templates()
    domains = {domain for domain, _ in templates}
    assert {"runner", "dispatcher", "irc", "coins", "weather", "location"} <= domains


def test_catalog_missing_file(tmp_path):
    templates = load_event_templates(tmp_path / "absent.json")
    assert templates == {("app", "load_error"): "Event templates file missing"}
