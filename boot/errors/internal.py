"""Error types raised by the store, the HTTP client and the fetchers.

Raw aiohttp, JSON and sqlite3 exceptions are wrapped at the boundary where
they occur so handlers only deal with these categories:

  InternalError   – base; carries a ``data`` dict of context.
  NetworkError    – connection, timeout or 5xx; the only retried category.
  AuthError       – a provider refused the API key (401/403).
  ParsingError    – unexpected payload or page layout, other 4xx.
  RateLimitError  – the provider answered 429.
  StoreError      – the SQLite database could not be read or written.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


class InternalError(Exception):
    """Base error with optional structured context in ``data``."""

    data: dict[str, object]

    def __init__(self, message: str, *, data: Mapping[str, object] | None = None) -> None:
        super().__init__(message)
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    pass


class AuthError(InternalError):
    pass


class ParsingError(InternalError):
    pass


@dataclass
class RateLimitContext:
    """Rate limit details reported by the provider.

    Attributes:
        retry_after: Seconds from ``Retry-After``, or None if not sent.
    """

    retry_after: float | None = None


class RateLimitError(InternalError):
    def __init__(
        self, message: str = "Rate limited", *, context: RateLimitContext | None = None
    ):
        super().__init__(message, data={"rate_limit": context})

    @property
    def retry_after(self) -> float | None:
        context = self.data.get("rate_limit")
        return context.retry_after if isinstance(context, RateLimitContext) else None


class StoreError(InternalError):
    """A database operation failed.

    Args:
        message: Description including the sqlite error text.
        operation: Name of the store method that failed.
    """

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message, data={"operation": operation} if operation else None)

    @property
    def operation(self) -> str | None:
        op = self.data.get("operation")
        return op if isinstance(op, str) else None


__all__ = [
    "InternalError",
    "NetworkError",
    "AuthError",
    "ParsingError",
    "RateLimitError",
    "RateLimitContext",
    "StoreError",
]
