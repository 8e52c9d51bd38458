"""
The main orchestrator: resolves requested versions, then materializes each
resolved release in turn.
"""

import logging
from typing import List, Optional, Sequence

from spectral_binaries.api.client import GitHubReleasesClient
from spectral_binaries.download import AssetFetcher, DownloadScheduler
from spectral_binaries.exceptions import (
    MaterializationError,
    MissingArgumentsError,
    UnresolvedVersionsError,
)
from spectral_binaries.models.config import PackagerConfig
from spectral_binaries.models.stats import RunStats

from .materializer import PackageMaterializer
from .resolver import ReleaseResolver

log = logging.getLogger(__name__)


def parse_requested_versions(versions: Optional[Sequence[str]]) -> List[str]:
    """
    Normalizes caller-supplied identifiers, dropping blanks and duplicates.

    Raises:
        MissingArgumentsError: If no identifier remains.
    """
    cleaned = [v.strip() for v in versions or [] if v and v.strip()]
    if not cleaned:
        raise MissingArgumentsError('must provide a version, e.g. "latest", "6.11.1"')
    return list(dict.fromkeys(cleaned))


class RunOrchestrator:
    """Orchestrates one packaging run."""

    def __init__(
        self,
        config: PackagerConfig,
        client: Optional[GitHubReleasesClient] = None,
        fetcher: Optional[AssetFetcher] = None,
    ):
        self.config = config
        self.client = client or GitHubReleasesClient(config)
        self.fetcher = fetcher or AssetFetcher(
            max_redirects=config.max_redirects,
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
        )
        self.stats = RunStats()
        # One scheduler for the whole run keeps the download bound process-wide.
        self.scheduler = DownloadScheduler(self.fetcher, config.max_concurrent_downloads)
        self.resolver = ReleaseResolver(self.client)
        self.materializer = PackageMaterializer(
            config, self.client, self.scheduler, self.stats
        )

    async def run(self, versions: Optional[Sequence[str]]) -> RunStats:
        """
        Resolves `versions` and materializes each release, one release at a time.

        A release whose materialization fails is logged and recorded in the
        stats; the remaining releases are still attempted.

        Raises:
            MissingArgumentsError: No versions were given.
            ListingFetchError: The listing failed; nothing is materialized.
            UnresolvedVersionsError: In strict mode, before anything is materialized.
        """
        requested = parse_requested_versions(versions)
        self.stats.requested = requested

        releases = await self.resolver.resolve(requested)

        self.stats.unresolved = [v for v in requested if v not in releases]
        if self.stats.unresolved:
            log.warning(
                "[yellow]No release found for: "
                f"{', '.join(self.stats.unresolved)}[/yellow]"
            )
            if self.config.strict:
                raise UnresolvedVersionsError(self.stats.unresolved)

        done_tags = set()
        for version in requested:
            release = releases.get(version)
            if release is None or release.tag in done_tags:
                continue
            done_tags.add(release.tag)

            try:
                await self.materializer.materialize(release)
            except MaterializationError as e:
                log.error(f"[red]Failed to package release {release.tag}[/red]")
                for failure in e.failures:
                    log.error(f"[red]  {type(failure).__name__}: {failure}[/red]")
                self.stats.failed[release.tag] = str(e)
            else:
                self.stats.materialized.append(release.tag)

        return self.stats

    async def close(self) -> None:
        """Closes the API and download sessions."""
        await self.client.close()
        await self.fetcher.close()
