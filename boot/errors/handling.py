from __future__ import annotations

import sqlite3
import time

import aiohttp

from ..logging_config import log_structured_error
from .internal import (
    AuthError,
    InternalError,
    NetworkError,
    ParsingError,
    RateLimitContext,
    RateLimitError,
    StoreError,
)


def log_error(message: str, error: Exception, context: dict = None) -> None:
    """Logs an error message with the associated exception details.

    The error is categorised from its type so the aggregator can report
    per-category rates (network, auth, ratelimit, parsing, store, internal).

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    error_type = "unknown"
    if isinstance(error, NetworkError | OSError | ConnectionError):
        error_type = "network"
    elif isinstance(error, AuthError):
        error_type = "auth"
    elif isinstance(error, RateLimitError):
        error_type = "ratelimit"
    elif isinstance(error, ParsingError):
        error_type = "parsing"
    elif isinstance(error, StoreError | sqlite3.Error):
        error_type = "store"
    elif isinstance(error, InternalError):
        error_type = "internal"

    log_structured_error(
        error_type=error_type,
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
    )


def error_for_status(status: int, context: str, body: str = "", retry_after: str | None = None) -> InternalError:
    """Map an HTTP error status onto the internal error hierarchy.

    Args:
        status: HTTP status code (>= 400).
        context: Descriptive context for the operation (e.g., "weather lookup").
        body: Optional response body excerpt for the message.
        retry_after: Raw Retry-After header value, if any.

    Returns:
        The InternalError subclass instance to raise.
    """
    excerpt = body[:200]
    if status in (401, 403):
        return AuthError(
            f"Provider rejected credentials in {context} (HTTP {status}). Check the configured API key. {excerpt}".strip(),
            data={"http_status": status},
        )
    if status == 429:
        try:
            wait = float(retry_after) if retry_after else None
        except ValueError:
            wait = None
        return RateLimitError(
            f"Provider rate limit exceeded in {context}.",
            context=RateLimitContext(retry_after=wait),
        )
    if 400 <= status < 500:
        return ParsingError(
            f"Client error in {context} (HTTP {status}). {excerpt}".strip(),
            data={"http_status": status},
        )
    return NetworkError(
        f"Server error in {context} (HTTP {status}).",
        data={"http_status": status},
    )


def handle_api_error(error: Exception, context: str) -> InternalError:
    """Translate a raw client exception into the internal error hierarchy.

    Args:
        error: The exception raised by aiohttp or the JSON decoder.
        context: Descriptive context for the operation.

    Returns:
        An InternalError subclass; callers raise it ``from`` the original.
    """
    if isinstance(error, InternalError):
        return error
    error_context = {"operation": context, "timestamp": time.time()}
    if isinstance(error, aiohttp.ClientResponseError):
        return error_for_status(error.status, context, error.message)
    if isinstance(error, TimeoutError | aiohttp.ClientError | OSError):
        return NetworkError(
            f"Network issue in {context}. Error: {str(error) or type(error).__name__}",
            data=error_context,
        )
    if isinstance(error, ValueError | KeyError | TypeError | IndexError):
        return ParsingError(
            f"Unexpected payload in {context}. Error: {str(error)}",
            data=error_context,
        )
    return InternalError(
        f"Unexpected error in {context}. Error: {str(error)}",
        data=error_context,
    )
