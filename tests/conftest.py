"""
Shared pytest fixtures for fetchpool tests.

Provides:
- Output directories and sinks
- A scriptable in-memory fetcher
- A local aiohttp server for real HTTP transfers
"""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import Callable

import pytest
from aiohttp import web

from fetchpool.exceptions import FetchError
from fetchpool.models.job import Job
from fetchpool.storage.sink import OutputSink


def content_for(location: str) -> bytes:
    """The bytes FakeFetcher writes for a location."""
    return f"content of {location}".encode()


class FakeFetcher:
    """
    Writes deterministic content for each location without touching the network.

    Args:
        failing: Locations whose fetch raises FetchError after a partial write.
        barrier: If given, every fetch waits on it before finishing.
        on_fetch: Hook called with each job before it is written.
        calls: Shared list recording every fetched job id, across fetchers.
    """

    def __init__(
        self,
        failing: set[str] | None = None,
        barrier: threading.Barrier | None = None,
        on_fetch: Callable[[Job], None] | None = None,
        calls: list[int] | None = None,
        calls_lock: threading.Lock | None = None,
    ):
        self.failing = failing or set()
        self.barrier = barrier
        self.on_fetch = on_fetch
        self.calls = calls if calls is not None else []
        self.calls_lock = calls_lock or threading.Lock()
        self.closed = False

    async def fetch(self, job: Job, destination: Path) -> int:
        with self.calls_lock:
            self.calls.append(job.id)
        if self.on_fetch:
            self.on_fetch(job)
        if self.barrier:
            self.barrier.wait()

        data = content_for(job.location)
        if job.location in self.failing:
            destination.write_bytes(data[:3])
            raise FetchError(job, "unreachable host")
        destination.write_bytes(data)
        return len(data)

    async def close(self) -> None:
        self.closed = True


class FakeFetcherFactory:
    """Builds FakeFetchers that share one call log."""

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.calls: list[int] = []
        self.lock = threading.Lock()
        self.fetchers: list[FakeFetcher] = []

    def __call__(self) -> FakeFetcher:
        fetcher = FakeFetcher(calls=self.calls, calls_lock=self.lock, **self.kwargs)
        self.fetchers.append(fetcher)
        return fetcher


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """An existing, empty output directory."""
    out = tmp_path / "out"
    out.mkdir()
    return out


@pytest.fixture
def sink(output_dir: Path) -> OutputSink:
    return OutputSink(output_dir, "jpg")


@pytest.fixture
def fake_factory() -> FakeFetcherFactory:
    return FakeFetcherFactory()


@pytest.fixture(scope="session")
def http_server():
    """
    Serves content from a background thread.

    Routes:
        /images/{name}  -> b"image:{name}"
        /big/{size}     -> `size` bytes of b"x"
        /missing/{name} -> 404
    """

    async def serve_image(request: web.Request) -> web.Response:
        return web.Response(body=f"image:{request.match_info['name']}".encode())

    async def serve_big(request: web.Request) -> web.Response:
        return web.Response(body=b"x" * int(request.match_info["size"]))

    async def not_found(request: web.Request) -> web.Response:
        raise web.HTTPNotFound()

    app = web.Application()
    app.router.add_get("/images/{name}", serve_image)
    app.router.add_get("/big/{size}", serve_big)
    app.router.add_get("/missing/{name}", not_found)

    loop = asyncio.new_event_loop()
    runner = web.AppRunner(app)
    loop.run_until_complete(runner.setup())
    site = web.TCPSite(runner, "127.0.0.1", 0)
    loop.run_until_complete(site.start())
    port = runner.addresses[0][1]

    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()

    yield f"http://127.0.0.1:{port}"

    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=5)
    loop.run_until_complete(runner.cleanup())
    loop.close()
