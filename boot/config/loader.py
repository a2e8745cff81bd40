"""Configuration loading utilities."""

from __future__ import annotations

import logging
import os
import sys

from pydantic import ValidationError

from .model import BotConfig
from .repository import ConfigRepository

DEFAULT_CONFIG_FILE = "boot.conf"


def config_path() -> str:
    return os.environ.get("BOOT_CONF_FILE", DEFAULT_CONFIG_FILE)


def get_configuration(path: str | None = None) -> BotConfig:
    """Load and validate the bot configuration.

    Args:
        path: Explicit configuration path; defaults to ``$BOOT_CONF_FILE``.

    Returns:
        The validated BotConfig.

    Raises:
        SystemExit: If the file is missing or does not validate.
    """
    config_file = path or config_path()
    raw = ConfigRepository(config_file).load_raw()
    if not raw:
        logging.error(f"📁 No configuration found at {config_file}")
        sys.exit(1)
    try:
        config = BotConfig.from_dict(raw)
    except ValidationError as e:
        logging.error(f"⚠️ Invalid configuration in {config_file}: {e.error_count()} error(s)")
        for err in e.errors():
            loc = ".".join(str(p) for p in err["loc"])
            logging.error(f"   {loc}: {err['msg']}")
        sys.exit(1)
    logging.info(
        f"✅ Configuration loaded nick={config.nickname} server={config.server}:{config.port} channels={len(config.channels)}"
    )
    return config
