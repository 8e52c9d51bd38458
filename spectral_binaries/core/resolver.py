"""
Resolves requested version identifiers to upstream releases by walking the
paginated release listing.
"""

import logging
from typing import Dict, Iterable

from spectral_binaries.api.client import GitHubReleasesClient
from spectral_binaries.models.release import LATEST, Release

log = logging.getLogger(__name__)


class ReleaseResolver:
    """
    Maps version identifiers (release tags or the "latest" sentinel) to releases.

    Pages are requested in order only while some identifier is still
    unmatched. The listing ends at a missing or empty page; identifiers not
    found by then are left out of the result instead of raising.
    """

    def __init__(self, client: GitHubReleasesClient):
        self.client = client

    async def resolve(self, versions: Iterable[str]) -> Dict[str, Release]:
        """
        Args:
            versions: Requested tags, optionally including "latest".

        Returns:
            Requested identifier -> release, for every identifier found.
            "latest" and its literal tag map to the same release when both
            were requested.

        Raises:
            ListingFetchError: A page answered with a status other than 200 or 404.
        """
        still_needed = set(versions)
        resolved: Dict[str, Release] = {}
        page = 1

        while still_needed:
            log.info(f"requesting page {page}")
            releases = await self.client.list_releases(page)
            if not releases:
                # 404 or an empty page: the end of the listing
                log.debug(f"Release listing exhausted at page {page}")
                break

            if page == 1 and LATEST in still_needed:
                resolved[LATEST] = releases[0]
                still_needed.discard(LATEST)

            for release in releases:
                if release.tag in still_needed:
                    resolved[release.tag] = release
                    still_needed.discard(release.tag)

            page += 1

        if still_needed:
            log.debug(f"Unmatched after {page - 1} page(s): {sorted(still_needed)}")
        return resolved
