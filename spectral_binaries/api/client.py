"""
Async client for the GitHub releases API and raw file hosting.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

import aiohttp

from spectral_binaries import __version__
from spectral_binaries.exceptions import (
    ListingFetchError,
    TransportError,
    UnexpectedStatusError,
)
from spectral_binaries.models.config import PackagerConfig
from spectral_binaries.models.release import Release

log = logging.getLogger(__name__)


class GitHubReleasesClient:
    """
    Async client for one upstream repository.

    Provides the paginated release listing, the "latest release" shortcut and
    raw file contents at a given ref (used for license metadata).
    """

    def __init__(self, config: PackagerConfig):
        """
        Initializes the API client.

        Args:
            config: Validated configuration naming the upstream repository,
                base URLs, token and timeouts.
        """
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def repo_path(self) -> str:
        return f"{self.config.owner}/{self.config.repo}"

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            headers = {
                "User-Agent": f"spectral-binaries/{__version__}",
                "Accept-Encoding": "gzip, deflate",
            }
            self._session = aiohttp.ClientSession(
                headers=headers,
                timeout=aiohttp.ClientTimeout(
                    total=None,
                    sock_connect=self.config.connect_timeout,
                    sock_read=self.config.read_timeout,
                ),
            )
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    def _api_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.config.github_token:
            headers["Authorization"] = f"Bearer {self.config.github_token}"
        return headers

    async def _get_json(self, url: str, **params: Any) -> tuple[int, Any]:
        """
        Performs a GET and returns `(status, payload)`. The payload is only
        decoded for 200 responses and is None otherwise.
        """
        session = await self._initialize_session()
        headers = self._api_headers() if url.startswith(self.config.api_base_url) else {}
        start_time = time.monotonic()
        try:
            async with session.get(url, params=params or None, headers=headers) as r:
                duration_ms = (time.monotonic() - start_time) * 1000
                log.debug(f"GET {r.url} -> {r.status} in {duration_ms:.0f}ms")
                if r.status != 200:
                    return r.status, None
                # raw.githubusercontent.com serves JSON files as text/plain
                return r.status, await r.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(url, str(e) or type(e).__name__) from e

    async def list_releases(self, page: int) -> Optional[List[Release]]:
        """
        Fetches one page of the release listing, newest first.

        Returns:
            The releases on the page, or None when the page does not exist.

        Raises:
            ListingFetchError: For any other non-success status.
        """
        url = f"{self.config.api_base_url}/repos/{self.repo_path}/releases"
        status, payload = await self._get_json(url, page=page)
        if status == 404:
            return None
        if status != 200:
            raise ListingFetchError(page, status)
        return [Release.model_validate(entry) for entry in payload]

    async def fetch_latest_release(self) -> Release:
        """Fetches the most recently published (non-prerelease) release."""
        url = f"{self.config.api_base_url}/repos/{self.repo_path}/releases/latest"
        status, payload = await self._get_json(url)
        if status != 200:
            raise UnexpectedStatusError(status, url)
        return Release.model_validate(payload)

    async def fetch_raw_json(self, ref: str, path: str) -> Dict[str, Any]:
        """Fetches and decodes a JSON file from the repository at `ref`."""
        url = f"{self.config.raw_base_url}/{self.repo_path}/{ref}/{path}"
        status, payload = await self._get_json(url)
        if status != 200:
            raise UnexpectedStatusError(status, url)
        return payload

    async def fetch_license(self, ref: str) -> Optional[str]:
        """Reads the `license` field of the upstream package.json at `ref`."""
        package_json = await self.fetch_raw_json(ref, "package.json")
        return package_json.get("license")
