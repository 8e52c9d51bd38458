"""
Handles the low-level downloading of release assets over HTTP with bounded
redirect following and size verification.
"""

import asyncio
import logging
import os
from pathlib import Path

import aiofiles
import aiohttp
from yarl import URL

from spectral_binaries.exceptions import (
    RedirectLimitExceededError,
    SizeMismatchError,
    TransportError,
    UnexpectedStatusError,
)

log = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o555  # r-xr-xr-x


def _remove_if_exists(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


class AssetFetcher:
    """
    Downloads one asset per call, streaming the body straight to disk.

    Redirects are followed manually so every hop is logged and the hop count
    is capped by `max_redirects`.
    """

    CHUNK_SIZE = 262144  # 256 KB

    def __init__(
        self,
        max_redirects: int = 5,
        connect_timeout: float = 15.0,
        read_timeout: float = 90.0,
    ):
        self.max_redirects = max_redirects
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self._session: aiohttp.ClientSession | None = None

    async def _initialize_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            # Identity encoding keeps Content-Length equal to the binary's size.
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(
                    total=None,
                    sock_connect=self.connect_timeout,
                    sock_read=self.read_timeout,
                ),
                headers={"Accept-Encoding": "identity"},
                auto_decompress=False,
            )
        return self._session

    async def close(self) -> None:
        """Closes the download session."""
        if self._session and not self._session.closed:
            await self._session.close()
            log.debug("Asset download session closed.")

    async def fetch(self, destination: Path, url: str, expected_size: int) -> Path:
        """
        Downloads `url` to `destination` and marks the file read+execute only.

        Args:
            destination: File to create or overwrite.
            url: Initial download URL; redirects are followed from here.
            expected_size: Declared byte size of the asset.

        Returns:
            The destination path.

        Raises:
            RedirectLimitExceededError: More than `max_redirects` hops.
            UnexpectedStatusError: A non-200, non-redirect response.
            SizeMismatchError: The reported or received length is not `expected_size`.
            TransportError: Connection failure or timeout.
        """
        session = await self._initialize_session()
        current_url = url
        hops = 0

        while True:
            try:
                async with session.get(current_url, allow_redirects=False) as response:
                    location = response.headers.get("Location")
                    if 300 <= response.status < 400 and location:
                        if hops >= self.max_redirects:
                            raise RedirectLimitExceededError(
                                response.status, current_url, hops
                            )
                        next_url = str(response.url.join(URL(location)))
                        log.info(
                            f"[dim]following redirect from {current_url} to {next_url}[/dim]"
                        )
                        current_url = next_url
                        hops += 1
                        continue

                    if response.status != 200:
                        raise UnexpectedStatusError(response.status, current_url)

                    await self._save(response, destination, expected_size, current_url)
                    return destination
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise TransportError(current_url, str(e) or type(e).__name__) from e

    async def _save(
        self,
        response: aiohttp.ClientResponse,
        destination: Path,
        expected_size: int,
        url: str,
    ) -> None:
        """Streams the body to disk, removing the file again on any failure."""
        if response.content_length != expected_size:
            raise SizeMismatchError(expected_size, response.content_length, url)

        log.info(f"saving [cyan]{destination}[/cyan]")
        # A previous run leaves the file read-only, so replace rather than open it.
        await asyncio.to_thread(_remove_if_exists, destination)

        written = 0
        try:
            async with aiofiles.open(destination, "wb") as f:
                async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                    await f.write(chunk)
                    written += len(chunk)

            if written != expected_size:
                raise SizeMismatchError(expected_size, written, url)

            await asyncio.to_thread(os.chmod, destination, EXECUTABLE_MODE)
        except (Exception, asyncio.CancelledError):
            log.debug(f"Removing partial download '{destination.name}'")
            await asyncio.to_thread(_remove_if_exists, destination)
            raise
