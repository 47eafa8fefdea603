"""Async HTTP client utilities."""

import asyncio
import logging
import aiohttp
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures worth another attempt. HTTP status errors are answers, not outages.
RETRYABLE_ERRORS = (aiohttp.ClientConnectionError, aiohttp.ClientPayloadError, asyncio.TimeoutError)


class AsyncHTTPClient:
    """Reusable async HTTP client."""

    def __init__(self, headers: Optional[Dict[str, str]] = None, timeout: float = 60.0,
                 retries: int = 0, retry_delay: float = 1.0):
        self.default_headers = headers or {}
        # Small requests are bounded as a whole; streamed bodies only while they stall.
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.stream_timeout = aiohttp.ClientTimeout(total=None, sock_connect=timeout, sock_read=timeout)
        self.retries = retries
        self.retry_delay = retry_delay
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(headers=self.default_headers, timeout=self.stream_timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self.session:
            await self.session.close()
            self.session = None

    def _session(self) -> aiohttp.ClientSession:
        if self.session is None:
            raise RuntimeError("AsyncHTTPClient used outside of 'async with'")
        return self.session

    async def with_retries(self, func: Callable[[], Awaitable[T]], what: str) -> T:
        """Run ``func``, retrying transport failures up to ``self.retries`` times."""
        attempt = 0
        while True:
            try:
                return await func()
            except RETRYABLE_ERRORS as e:
                if attempt >= self.retries:
                    raise
                attempt += 1
                logger.debug("Retrying %s (%d/%d) after %r", what, attempt, self.retries, e)
                await asyncio.sleep(self.retry_delay * attempt)

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None,
                  params: Optional[Dict[str, Any]] = None) -> Any:
        """GET request returning decoded JSON."""
        async def _get():
            async with self._session().get(url, headers=headers, params=params, timeout=self.timeout) as resp:
                resp.raise_for_status()
                # GitHub may answer with a non-JSON content type on errors.
                return await resp.json(content_type=None)

        return await self.with_retries(_get, f"GET {url}")

    async def head(self, url: str, allow_redirects: bool = False) -> int:
        """HEAD request returning the status code."""
        async def _head():
            async with self._session().head(url, allow_redirects=allow_redirects, timeout=self.timeout) as resp:
                return resp.status

        return await self.with_retries(_head, f"HEAD {url}")

    async def iter_bytes(self, url: str, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
        """Stream a response body; raises on truncated bodies."""
        async with self._session().get(url) as resp:
            resp.raise_for_status()
            expected = resp.content_length
            received = 0
            async for chunk in resp.content.iter_chunked(chunk_size):
                received += len(chunk)
                yield chunk
            if expected is not None and received != expected:
                raise aiohttp.ClientPayloadError(
                    f"Truncated body: received {received} of {expected} bytes"
                )
