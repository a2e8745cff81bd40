"""
Configuration constants for the boot IRC bot

This module contains all tunable constants used throughout the application.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Network/HTTP constants
HTTP_REQUEST_TIMEOUT_SECONDS = _get_env_int(
    "HTTP_REQUEST_TIMEOUT_SECONDS", 10
)  # Total timeout for every outbound HTTP request
HTTP_MAX_REDIRECTS = _get_env_int(
    "HTTP_MAX_REDIRECTS", 10
)  # Redirects followed before giving up
TITLE_MAX_BYTES = _get_env_int(
    "TITLE_MAX_BYTES", 512 * 1024
)  # Body bytes read when looking for a page title
DEFAULT_USER_AGENT = os.getenv(
    "DEFAULT_USER_AGENT", "Mozilla/5.0 boot-bot/1.0"
)  # Some sites refuse requests without a browser-like agent

# Retry/backoff constants
FETCH_MAX_ATTEMPTS = _get_env_int(
    "FETCH_MAX_ATTEMPTS", 2
)  # Attempts for JSON provider calls (network errors only)
RETRY_BACKOFF_MULTIPLIER = _get_env_float(
    "RETRY_BACKOFF_MULTIPLIER", 0.5
)  # Exponential backoff multiplier
RETRY_MAX_BACKOFF_SECONDS = _get_env_int(
    "RETRY_MAX_BACKOFF_SECONDS", 4
)  # Maximum backoff time in seconds

# IRC transport constants
IRC_CONNECT_TIMEOUT = _get_env_int(
    "IRC_CONNECT_TIMEOUT", 30
)  # Seconds allowed for the TCP connect
IRC_READ_LIMIT = _get_env_int(
    "IRC_READ_LIMIT", 64 * 1024
)  # StreamReader buffer limit

# Bot behaviour constants
NOTIFICATION_DELIVERY_CAP = _get_env_int(
    "NOTIFICATION_DELIVERY_CAP", 2
)  # Notifications delivered per message from the recipient
HANGMAN_MAX_ATTEMPTS = _get_env_int(
    "HANGMAN_MAX_ATTEMPTS", 7
)  # Wrong guesses before the game is lost
COIN_SNAPSHOT_TTL_SECONDS = _get_env_int(
    "COIN_SNAPSHOT_TTL_SECONDS", 300
)  # Coin summaries younger than this are replayed from the store
TITLE_PREFIX = "↪"  # Prefix for page title replies

# Logging constants
ERROR_ALERT_RATE_PER_HOUR = _get_env_float(
    "ERROR_ALERT_RATE_PER_HOUR", 10.0
)  # Error rate per type that triggers a critical alert
