"""Shared HTTP session for every fetcher."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from ..constants import (
    DEFAULT_USER_AGENT,
    HTTP_MAX_REDIRECTS,
    HTTP_REQUEST_TIMEOUT_SECONDS,
)
from ..errors.handling import error_for_status, handle_api_error
from ..errors.internal import NetworkError
from ..utils.retry import retry_async

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


@dataclass
class SessionConfig:
    """Configuration for the shared HTTP session."""

    timeout_total: int = HTTP_REQUEST_TIMEOUT_SECONDS
    max_redirects: int = HTTP_MAX_REDIRECTS
    user_agent: str = DEFAULT_USER_AGENT
    headers: dict[str, str] = field(default_factory=dict)


class HTTPClient:
    """Lazily created ``aiohttp.ClientSession`` with uniform error mapping."""

    def __init__(self, config: SessionConfig | None = None) -> None:
        self.config = config or SessionConfig()
        self._session: aiohttp.ClientSession | None = None
        self._lock = asyncio.Lock()

    async def get_session(self) -> aiohttp.ClientSession:
        async with self._lock:
            if self._session is None or self._session.closed:
                headers = {"User-Agent": self.config.user_agent, **self.config.headers}
                self._session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self.config.timeout_total),
                    headers=headers,
                )
                logging.debug("🔗 HTTP session created")
            return self._session

    @asynccontextmanager
    async def request(
        self, method: str, url: str, **kwargs: Any
    ) -> AsyncIterator[aiohttp.ClientResponse]:
        """Open a response, mapping transport failures to ``NetworkError``."""
        session = await self.get_session()
        kwargs.setdefault("max_redirects", self.config.max_redirects)
        try:
            async with session.request(method, url, **kwargs) as response:
                logging.debug(
                    f"HTTP {method} {url} -> {response.status} "
                    f"({response.headers.get('content-type', 'none')})"
                )
                yield response
        except (TimeoutError, aiohttp.ClientError) as e:
            raise NetworkError(
                f"HTTP {method} {url} failed: {str(e) or type(e).__name__}"
            ) from e

    async def get_json(
        self, url: str, context: str, *, params: dict[str, Any] | None = None
    ) -> Any:
        """GET ``url`` and decode JSON, retrying transient network errors.

        Raises:
            NetworkError: Transport failure or 5xx after all attempts.
            AuthError: 401/403.
            RateLimitError: 429.
            ParsingError: Other 4xx or an undecodable body.
        """

        async def operation() -> Any:
            async with self.request("GET", url, params=params) as resp:
                if resp.status >= 400:
                    body = await resp.text(errors="replace")
                    raise error_for_status(
                        resp.status, context, body, resp.headers.get("Retry-After")
                    )
                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise handle_api_error(e, context) from e

        return await retry_async(operation, context)

    async def get_text(self, url: str, max_bytes: int) -> str | None:
        """Return at most ``max_bytes`` of an HTML body, or ``None`` for other content."""
        async with self.request("GET", url) as resp:
            if resp.status >= 400:
                raise error_for_status(resp.status, f"GET {url}")
            if resp.content_type not in HTML_CONTENT_TYPES:
                logging.debug(f"Skipping non-HTML content at {url}: {resp.content_type}")
                return None
            raw = await self._read_capped(resp, url, max_bytes)
            try:
                return raw.decode(resp.charset or "utf-8", errors="replace")
            except LookupError:  # unknown charset label
                return raw.decode("utf-8", errors="replace")

    @staticmethod
    async def _read_capped(resp: aiohttp.ClientResponse, url: str, max_bytes: int) -> bytes:
        """Read the body until EOF or ``max_bytes``, across as many chunks as it takes."""
        chunks: list[bytes] = []
        remaining = max_bytes
        try:
            while remaining > 0:
                # read(n) returns what is buffered, up to n
                chunk = await resp.content.read(remaining)
                if not chunk:
                    break
                chunks.append(chunk)
                remaining -= len(chunk)
        except (TimeoutError, aiohttp.ClientError) as e:
            raise NetworkError(f"Reading {url} failed: {e}") from e
        return b"".join(chunks)

    async def close(self) -> None:
        if self._session and not self._session.closed:
            try:
                await self._session.close()
            except (aiohttp.ClientError, OSError) as e:
                logging.error(f"💥 Error closing HTTP session: {str(e)}")
        self._session = None
