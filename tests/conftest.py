"""Shared fakes for tests."""

import hashlib
import aiohttp
import pytest
from typing import Dict, List, Optional, Set

from koka_sources.config import UpdaterConfig
from koka_sources.releases.models import Platform

DOWNLOAD_BASE = "https://github.com/koka-lang/koka/releases/download"


def asset_url(tag: str, platform: Platform) -> str:
    return f"{DOWNLOAD_BASE}/{tag}/koka-{tag}-{platform.release_name}.tar.gz"


def sha256_of(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def release(tag: str, draft: bool = False) -> dict:
    return {"tag_name": tag, "draft": draft}


class FakeHTTP:
    """Stands in for AsyncHTTPClient: a release listing plus downloadable assets."""

    def __init__(self, releases: Optional[List[dict]] = None, assets: Optional[Dict[str, bytes]] = None,
                 per_page: int = 100):
        releases = releases or []
        self.pages = [releases[i:i + per_page] for i in range(0, len(releases), per_page)] or [[]]
        self.assets = dict(assets or {})
        self.broken_downloads: Set[str] = set()
        self.broken_probes: Set[str] = set()
        self.listing_error: Optional[BaseException] = None
        self.listing_payload = None
        self.get_calls: List[dict] = []
        self.head_calls: List[str] = []
        self.downloads: List[str] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None

    async def with_retries(self, func, what):
        return await func()

    async def get(self, url, headers=None, params=None):
        self.get_calls.append({"url": url, "headers": headers, "params": params})
        if self.listing_error is not None:
            raise self.listing_error
        if self.listing_payload is not None:
            return self.listing_payload
        page = (params or {}).get("page", 1)
        if page > len(self.pages):
            return []
        return self.pages[page - 1]

    async def head(self, url, allow_redirects=False):
        self.head_calls.append(url)
        if url in self.broken_probes:
            raise aiohttp.ClientConnectionError("connection reset")
        return 302 if url in self.assets else 404

    async def iter_bytes(self, url, chunk_size=64 * 1024):
        self.downloads.append(url)
        if url in self.broken_downloads:
            yield self.assets[url][:3]
            raise aiohttp.ClientPayloadError("Truncated body: received 3 bytes")
        if url not in self.assets:
            raise aiohttp.ClientConnectionError(f"404 Not Found: {url}")
        data = self.assets[url]
        for i in range(0, len(data), 4):
            yield data[i:i + 4]


def publish(http: FakeHTTP, tag: str, platforms=tuple(Platform)) -> Dict[Platform, bytes]:
    """Make ``tag`` downloadable for ``platforms``; returns the asset bodies."""
    bodies = {}
    for platform in platforms:
        body = f"koka {tag} {platform.release_name}".encode()
        http.assets[asset_url(tag, platform)] = body
        bodies[platform] = body
    return bodies


@pytest.fixture
def config(tmp_path):
    return UpdaterConfig(sources_path=tmp_path / "sources.json", concurrency=2)
