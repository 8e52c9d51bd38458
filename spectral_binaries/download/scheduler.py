"""
Bounds how many asset downloads are in flight at once.
"""

import asyncio
import logging
from pathlib import Path

from spectral_binaries.models.release import Asset

from .fetcher import AssetFetcher

log = logging.getLogger(__name__)


class DownloadScheduler:
    """
    Queues asset downloads behind a shared semaphore.

    One scheduler is shared by every release of a run, so the bound is
    process-wide. Waiters are admitted in submission order and a slot is
    released when the download settles, whether it succeeded or failed.
    """

    def __init__(self, fetcher: AssetFetcher, max_concurrent: int = 1):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.fetcher = fetcher
        self.max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._in_flight = 0

    async def download(self, destination: Path, asset: Asset) -> Path:
        """Waits for a free slot, then fetches `asset` to `destination`."""
        async with self._semaphore:
            self._in_flight += 1
            log.debug(
                f"Downloading '{asset.name}' ({self._in_flight}/{self.max_concurrent} slots)"
            )
            try:
                return await self.fetcher.fetch(
                    destination, asset.download_url, asset.size
                )
            finally:
                self._in_flight -= 1
