"""
Download Layer.

This package retrieves release assets to disk. The `AssetFetcher` performs a
single redirect-following, size-checked download, and the `DownloadScheduler`
bounds how many of those run at once across the whole process.
"""

from .fetcher import AssetFetcher
from .scheduler import DownloadScheduler

__all__ = ["AssetFetcher", "DownloadScheduler"]
