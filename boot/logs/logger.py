"""Event-style logging: ``log_event("coins", "fetched", symbol="btc")``.

Each ``(domain, action)`` pair maps to a template in ``event_templates.json``
filled from the keyword fields. ``user`` and ``channel`` are pulled out into a
fixed-width ``[user@channel]`` column so lines about the same conversation
line up in the console.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ..logging_config import debug_enabled
from . import event_catalog

PREFIX_WIDTH = 24
EVENT_NAME_WIDTH = 32


def render_human(domain: str, action: str, fields: Mapping[str, object]) -> str:
    """Fill the catalog template, or derive ``"domain: action"`` when there is none."""
    template = event_catalog.EVENT_TEMPLATES.get((domain, action))
    if template is None:
        return f"{domain.replace('_', ' ')}: {action.replace('_', ' ')}"
    try:
        return template.format(**fields)
    except (KeyError, IndexError, ValueError):
        # a field the template needs was not passed
        return template


def who(user: object, channel: object) -> str:
    label = user if isinstance(user, str) and user else "system"
    if isinstance(channel, str) and channel:
        label = f"{label}@{channel}"
    return f"[{label.ljust(PREFIX_WIDTH)[:PREFIX_WIDTH]}]"


def event_column(name: str) -> str:
    if len(name) <= EVENT_NAME_WIDTH:
        return name.ljust(EVENT_NAME_WIDTH)
    return name[: EVENT_NAME_WIDTH - 1] + "…"


class BotLogger:
    """Thin wrapper over a stdlib logger that renders catalogued events.

    In debug mode (``DEBUG`` env) the event name and every remaining field are
    appended so the line can be grepped; otherwise only the human text shows.
    """

    def __init__(self, name: str = "boot") -> None:
        self.logger = logging.getLogger(name)

    def log_event(
        self,
        domain: str,
        action: str,
        level: int = logging.INFO,
        human: str | None = None,
        *,
        exc_info: bool = False,
        **fields: object,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        text = human if human is not None else render_human(domain, action, fields)
        prefix = who(fields.pop("user", None), fields.pop("channel", None))
        if debug_enabled():
            name = f"{domain}_{action}".lower()
            line = f"{event_column(name)} {prefix} {text}"
            if fields:
                line += " (" + ", ".join(f"{k}={v}" for k, v in fields.items()) + ")"
        else:
            line = f"{prefix} {text}"
        self.logger.log(level, line, exc_info=exc_info)


logger = BotLogger()
