"""Download manager for release assets: streaming content hashes."""

import asyncio
import hashlib
import logging
import aiohttp

from ..errors import HashComputeError
from ..utils import AsyncHTTPClient

logger = logging.getLogger(__name__)


class DownloadManager:
    def __init__(self, http: AsyncHTTPClient, concurrent_downloads: int = 4):
        self.http = http
        self.concurrent_downloads = concurrent_downloads
        self.semaphore = asyncio.Semaphore(concurrent_downloads)

    async def compute_sha256(self, url: str) -> str:
        """Stream ``url`` and return the SHA256 hex digest of its body."""
        async def _hash() -> str:
            digest = hashlib.sha256()
            async for chunk in self.http.iter_bytes(url):
                digest.update(chunk)
            return digest.hexdigest()

        logger.info("Computing SHA256 for: %s", url)
        async with self.semaphore:
            try:
                return await self.http.with_retries(_hash, f"download {url}")
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise HashComputeError(url, str(e) or type(e).__name__) from e
