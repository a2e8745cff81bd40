from __future__ import annotations

import json
import logging
import os
from typing import Any


def _unwrap(data: Any) -> dict[str, Any]:
    """Accept ``{...}`` or ``{"bot": {...}}``; anything else is treated as empty."""
    if isinstance(data, dict) and isinstance(data.get("bot"), dict):
        data = data["bot"]
    return data if isinstance(data, dict) else {}


class ConfigRepository:
    """Reads the JSON configuration file; the bot loads it once at startup."""

    def __init__(self, path: str | os.PathLike[str]):
        if not isinstance(path, str | os.PathLike):
            raise TypeError("path must be str or os.PathLike")
        self.path = os.fspath(path)

    def load_raw(self) -> dict[str, Any]:
        """Return the bot settings mapping, or ``{}`` if the file is missing or unreadable."""
        try:
            with open(self.path, encoding="utf-8") as f:
                return _unwrap(json.load(f))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logging.error(f"📁 Configuration load error in {self.path}: {e}")
            return {}
