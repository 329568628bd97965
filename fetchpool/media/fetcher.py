"""
Handles the low-level transfer of a job's location into its output file over HTTP.
"""

import asyncio
import logging
from pathlib import Path
from typing import Protocol

import aiofiles
import aiohttp

from fetchpool.exceptions import FetchError, WriteError
from fetchpool.models.job import Job

log = logging.getLogger(__name__)


class Fetcher(Protocol):
    """
    Transfers one job's content to a destination path.

    Each worker owns its own fetcher and drives it from the worker's event loop,
    so implementations need not be thread-safe.
    """

    async def fetch(self, job: Job, destination: Path) -> int:
        """Fetches the job's location into `destination` and returns the bytes written."""
        ...

    async def close(self) -> None:
        """Releases any resources held by the fetcher."""
        ...


class HttpFetcher:
    """A streaming HTTP fetcher backed by a lazily created aiohttp session."""

    CHUNK_SIZE = 131072  # 128 KB

    def __init__(self, limit_per_host: int = 8, chunk_size: int = CHUNK_SIZE):
        self.limit_per_host = limit_per_host
        self.chunk_size = chunk_size
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """
        Gets or creates the session. It must be created inside the event loop that
        uses it, which is why this happens on first fetch rather than in __init__.
        """
        if self._session and not self._session.closed:
            return self._session

        connector = aiohttp.TCPConnector(
            limit_per_host=self.limit_per_host,
            ttl_dns_cache=600,  # 10 minutes
            enable_cleanup_closed=True,
        )
        # No overall timeout: a transfer runs until it completes or fails.
        timeout = aiohttp.ClientTimeout(total=None)
        self._session = aiohttp.ClientSession(
            connector=connector,
            timeout=timeout,
            headers={"Accept-Encoding": "gzip, deflate"},
        )
        log.debug(f"Created fetch session with limit_per_host={self.limit_per_host}")
        return self._session

    async def fetch(self, job: Job, destination: Path) -> int:
        """
        Streams `job.location` into `destination`.

        Raises:
            FetchError: On transport failures or a non-2xx response.
            WriteError: If the destination cannot be opened or written.
        """
        session = await self._get_session()
        size = 0
        try:
            async with session.get(job.location, allow_redirects=True) as response:
                response.raise_for_status()
                try:
                    async with aiofiles.open(destination, "wb") as f:
                        async for chunk in response.content.iter_chunked(
                            self.chunk_size
                        ):
                            await f.write(chunk)
                            size += len(chunk)
                except (aiohttp.ClientError, asyncio.TimeoutError):
                    raise
                except OSError as e:
                    raise WriteError(job, f"could not write '{destination}': {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(job, str(e) or type(e).__name__) from e
        return size

    async def close(self) -> None:
        """Closes the underlying session if one was opened."""
        if self._session and not self._session.closed:
            await self._session.close()
            log.debug("Fetch session closed.")
        self._session = None
