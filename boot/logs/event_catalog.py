"""Human readable text for each logged ``(domain, action)`` event.

``event_templates.json`` is ``{"domain": {"action": "template"}}``; templates
use ``str.format`` fields supplied to ``BotLogger.log_event``.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from pathlib import Path

TEMPLATES_PATH = Path(__file__).with_name("event_templates.json")

EVENT_TEMPLATES: dict[tuple[str, str], str] = {}


def _flatten(raw: object) -> Iterator[tuple[tuple[str, str], str]]:
    if not isinstance(raw, Mapping):
        return
    for domain, actions in raw.items():
        if not isinstance(actions, Mapping):
            continue
        for action, template in actions.items():
            if isinstance(template, str):
                yield (str(domain), str(action)), template


def load_event_templates(path: Path = TEMPLATES_PATH) -> dict[tuple[str, str], str]:
    """Read ``path`` into a ``(domain, action) -> template`` map.

    Logging must keep working without the file, so a missing or broken file
    produces a single ``("app", "load_error")`` entry instead of raising.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {("app", "load_error"): "Event templates file missing"}
    except (OSError, ValueError) as e:
        return {("app", "load_error"): f"Failed to load event templates: {e}"[:200]}
    return dict(_flatten(raw))


def reload_event_templates() -> None:
    global EVENT_TEMPLATES  # noqa: PLW0603
    EVENT_TEMPLATES = load_event_templates()


reload_event_templates()

__all__ = ["EVENT_TEMPLATES", "TEMPLATES_PATH", "load_event_templates", "reload_event_templates"]
