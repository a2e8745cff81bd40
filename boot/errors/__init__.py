"""Error hierarchy and logging helpers."""

from .handling import error_for_status, handle_api_error, log_error  # noqa: F401
from .internal import (  # noqa: F401
    AuthError,
    InternalError,
    NetworkError,
    ParsingError,
    RateLimitContext,
    RateLimitError,
    StoreError,
)

__all__ = [
    "AuthError",
    "InternalError",
    "NetworkError",
    "ParsingError",
    "RateLimitContext",
    "RateLimitError",
    "StoreError",
    "error_for_status",
    "handle_api_error",
    "log_error",
]
