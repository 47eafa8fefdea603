"""Tests for asset hashing."""

import asyncio
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as LocalServer
from conftest import FakeHTTP, asset_url, publish, sha256_of

from koka_sources.errors import HashComputeError
from koka_sources.releases import DownloadManager
from koka_sources.releases.models import Platform
from koka_sources.utils import AsyncHTTPClient

CHUNK = b"k" * 1024


def trickling_app(chunks, delay, stall_after=None, stall=0.0):
    async def asset(request):
        resp = web.StreamResponse()
        resp.content_length = len(CHUNK) * chunks
        await resp.prepare(request)
        for i in range(chunks):
            if i == stall_after:
                await asyncio.sleep(stall)
            await resp.write(CHUNK)
            await asyncio.sleep(delay)
        await resp.write_eof()
        return resp

    app = web.Application()
    app.router.add_get("/asset", asset)
    return app


@pytest.mark.asyncio
async def test_compute_sha256_streams_body():
    http = FakeHTTP()
    bodies = publish(http, "v3.1.2", [Platform.X86_64_LINUX])
    digest = await DownloadManager(http).compute_sha256(asset_url("v3.1.2", Platform.X86_64_LINUX))
    assert digest == sha256_of(bodies[Platform.X86_64_LINUX])


@pytest.mark.asyncio
async def test_truncated_download_raises():
    http = FakeHTTP()
    publish(http, "v3.1.2", [Platform.X86_64_LINUX])
    url = asset_url("v3.1.2", Platform.X86_64_LINUX)
    http.broken_downloads.add(url)
    with pytest.raises(HashComputeError) as excinfo:
        await DownloadManager(http).compute_sha256(url)
    assert excinfo.value.url == url


@pytest.mark.asyncio
async def test_slow_download_longer_than_timeout_completes():
    # 10 chunks, 0.3s apart: about 3s in total, never idle for 1s
    async with LocalServer(trickling_app(chunks=10, delay=0.3)) as server:
        async with AsyncHTTPClient(timeout=1.0) as http:
            digest = await DownloadManager(http).compute_sha256(str(server.make_url("/asset")))
    assert digest == sha256_of(CHUNK * 10)


@pytest.mark.asyncio
async def test_stalled_download_times_out():
    async with LocalServer(trickling_app(chunks=3, delay=0, stall_after=1, stall=2.0)) as server:
        async with AsyncHTTPClient(timeout=0.5) as http:
            with pytest.raises(HashComputeError):
                await DownloadManager(http).compute_sha256(str(server.make_url("/asset")))
