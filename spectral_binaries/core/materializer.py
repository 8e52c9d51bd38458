"""
Writes the on-disk package for a single release: manifest, readme and assets.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles

from spectral_binaries.api.client import GitHubReleasesClient
from spectral_binaries.download.scheduler import DownloadScheduler
from spectral_binaries.exceptions import MaterializationError
from spectral_binaries.models.config import PackagerConfig
from spectral_binaries.models.release import Asset, Release
from spectral_binaries.models.stats import RunStats
from spectral_binaries.utils.path import create_dir, safe_child_path

log = logging.getLogger(__name__)

MANIFEST_FILE = "package.json"
README_FILE = "README.md"


class PackageMaterializer:
    """
    Produces `<output_dir>/<tag>/` for a release.

    The manifest, the readme and every asset download run as independent
    tasks; all of them are awaited before success or failure is decided.
    """

    def __init__(
        self,
        config: PackagerConfig,
        client: GitHubReleasesClient,
        scheduler: DownloadScheduler,
        stats: Optional[RunStats] = None,
    ):
        self.config = config
        self.client = client
        self.scheduler = scheduler
        self.stats = stats

    def package_dir(self, release: Release) -> Path:
        return safe_child_path(Path(self.config.output_dir), release.tag)

    async def materialize(self, release: Release) -> List[Path]:
        """
        Returns:
            Paths of every file written for the release.

        Raises:
            MaterializationError: If any of the tasks failed; carries all failures.
        """
        log.info(f"release {release.tag} has {len(release.assets)} assets")
        try:
            pkg_path = self.package_dir(release)
            await asyncio.to_thread(create_dir, pkg_path)
        except (ValueError, OSError) as e:
            raise MaterializationError(release.tag, [e]) from e

        results = await asyncio.gather(
            self.create_manifest(pkg_path, release),
            self.create_readme(pkg_path, release),
            *(self.download_asset(pkg_path, asset) for asset in release.assets),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            raise MaterializationError(release.tag, failures)

        log.info(f"[green]files stored for release {release.tag}[/green]")
        for path in results:
            log.debug(f"  {path}")
        return results

    def build_manifest(self, release: Release, license_id: Optional[str]) -> Dict[str, Any]:
        manifest: Dict[str, Any] = {
            "name": self.config.package_name,
            "version": release.display_name,
            "description": (
                f"Binaries of {self.config.display_name} {release.display_name} "
                f"({release.html_url}), via npm"
            ),
        }
        if self.config.repository_url:
            manifest["repository"] = {"url": self.config.repository_url}
        manifest["type"] = "module"
        if license_id:
            manifest["license"] = license_id
        return manifest

    def build_readme(self, release: Release) -> str:
        return (
            f"# {self.config.display_name} Binaries\n"
            "\n"
            f"Binaries of [{self.config.display_name} {release.display_name}]"
            f"({release.html_url}), via npm\n"
            "\n"
            f"{release.body}\n"
        )

    async def create_manifest(self, pkg_path: Path, release: Release) -> Path:
        """Writes package.json, taking the license from upstream at the release tag."""
        license_id = await self.client.fetch_license(release.tag)
        if not license_id:
            log.warning(
                f"[yellow]No license found upstream for {release.tag}[/yellow]"
            )
        manifest_path = pkg_path / MANIFEST_FILE
        async with aiofiles.open(manifest_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(self.build_manifest(release, license_id), indent=2))
        return manifest_path

    async def create_readme(self, pkg_path: Path, release: Release) -> Path:
        readme_path = pkg_path / README_FILE
        async with aiofiles.open(readme_path, "w", encoding="utf-8") as f:
            await f.write(self.build_readme(release))
        return readme_path

    async def download_asset(self, pkg_path: Path, asset: Asset) -> Path:
        asset_path = safe_child_path(pkg_path, asset.name)
        path = await self.scheduler.download(asset_path, asset)
        if self.stats is not None:
            self.stats.record_asset(asset.size)
        return path
