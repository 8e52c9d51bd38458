"""End-to-end runs against the fake upstream."""

import asyncio
import stat
import time
from pathlib import Path

import pytest

from spectral_binaries.core.orchestrator import RunOrchestrator, parse_requested_versions
from spectral_binaries.download.fetcher import AssetFetcher
from spectral_binaries.exceptions import (
    ListingFetchError,
    MissingArgumentsError,
    RedirectLimitExceededError,
    UnresolvedVersionsError,
)

BINARY = b"\xca\xfe\xba\xbe" * 256  # 1024 bytes


class TimingFetcher(AssetFetcher):
    """Records the start and end of every fetch."""

    def __init__(self):
        super().__init__()
        self.spans: list[tuple[float, float]] = []

    async def fetch(self, destination, url, expected_size):
        start = time.monotonic()
        try:
            await asyncio.sleep(0.01)
            return await super().fetch(destination, url, expected_size)
        finally:
            self.spans.append((start, time.monotonic()))


async def run(config, versions, fetcher=None):
    orchestrator = RunOrchestrator(config, fetcher=fetcher)
    try:
        return await orchestrator.run(versions)
    finally:
        await orchestrator.close()


class TestParseRequestedVersions:
    def test_strips_blanks_and_duplicates(self):
        assert parse_requested_versions([" latest", "v1", "", "v1"]) == ["latest", "v1"]

    @pytest.mark.parametrize("versions", [None, [], ["", "  "]])
    def test_nothing_requested(self, versions):
        with pytest.raises(MissingArgumentsError):
            parse_requested_versions(versions)


class TestRunOrchestrator:
    @pytest.mark.asyncio
    async def test_latest_end_to_end(self, upstream, config):
        upstream.add_page(upstream.release("v6.12.0", {"spectral-linux": BINARY}))

        stats = await run(config, ["latest"])

        pkg_path = Path(config.output_dir) / "v6.12.0"
        assert stats.materialized == ["v6.12.0"]
        assert stats.succeeded
        assert (pkg_path / "package.json").is_file()
        assert (pkg_path / "README.md").is_file()
        asset = pkg_path / "spectral-linux"
        assert asset.stat().st_size == 1024
        assert stat.S_IMODE(asset.stat().st_mode) == 0o555

    @pytest.mark.asyncio
    async def test_unknown_version_materializes_nothing(self, upstream, config):
        upstream.add_page(upstream.release("v2"))
        upstream.add_page(upstream.release("v1"))

        stats = await run(config, ["doesnotexist"])

        assert upstream.page_requests == [1, 2, 3]
        assert stats.unresolved == ["doesnotexist"]
        assert stats.materialized == []
        assert stats.succeeded
        assert not Path(config.output_dir).exists()

    @pytest.mark.asyncio
    async def test_strict_mode_rejects_unknown_versions(self, upstream, config):
        upstream.add_page(upstream.release("v2", {"tool": BINARY}))
        config.strict = True

        with pytest.raises(UnresolvedVersionsError) as exc_info:
            await run(config, ["v2", "v9"])

        assert exc_info.value.versions == ["v9"]
        assert not Path(config.output_dir).exists()

    @pytest.mark.asyncio
    async def test_redirect_loop_fails_release(self, upstream, config):
        payload = upstream.release("v6.12.0", {"spectral-linux": BINARY})
        payload["assets"][0]["browser_download_url"] = (
            f"{upstream.base_url}/redirect/6/spectral-linux"
        )
        upstream.add_page(payload)

        stats = await run(config, ["latest"])

        assert not stats.succeeded
        assert "v6.12.0" in stats.failed
        assert RedirectLimitExceededError.__name__ in stats.failed["v6.12.0"]
        assert not (Path(config.output_dir) / "v6.12.0" / "spectral-linux").exists()

    @pytest.mark.asyncio
    async def test_failed_release_does_not_stop_the_next(self, upstream, config):
        broken = upstream.release("v2", {"broken": BINARY})
        del upstream.assets["broken"]
        upstream.add_page(broken, upstream.release("v1", {"tool": BINARY}))

        stats = await run(config, ["v2", "v1"])

        assert list(stats.failed) == ["v2"]
        assert stats.materialized == ["v1"]

    @pytest.mark.asyncio
    async def test_unusable_tag_does_not_stop_the_next(self, upstream, config):
        upstream.add_page(
            upstream.release("..", {"stray": BINARY}),
            upstream.release("v1", {"tool": BINARY}),
        )

        stats = await run(config, ["..", "v1"])

        assert list(stats.failed) == [".."]
        assert stats.materialized == ["v1"]
        assert (Path(config.output_dir) / "v1" / "tool").is_file()

    @pytest.mark.asyncio
    async def test_latest_and_its_tag_packaged_once(self, upstream, config):
        upstream.add_page(upstream.release("v6.12.0", {"spectral-linux": BINARY}))
        fetcher = TimingFetcher()

        stats = await run(config, ["latest", "v6.12.0"], fetcher=fetcher)

        assert stats.materialized == ["v6.12.0"]
        assert len(fetcher.spans) == 1

    @pytest.mark.asyncio
    async def test_downloads_never_overlap_across_releases(self, upstream, config):
        upstream.add_page(
            upstream.release("v3", {"a3": BINARY, "b3": BINARY, "c3": BINARY}),
            upstream.release("v2", {"a2": BINARY, "b2": BINARY}),
        )
        upstream.add_page(upstream.release("v1", {"a1": BINARY, "b1": BINARY}))
        fetcher = TimingFetcher()

        stats = await run(config, ["v3", "v2", "v1"], fetcher=fetcher)

        assert stats.materialized == ["v3", "v2", "v1"]
        assert stats.assets_downloaded == 7
        spans = sorted(fetcher.spans)
        assert len(spans) == 7
        for (_, previous_end), (next_start, _) in zip(spans, spans[1:]):
            assert previous_end <= next_start

    @pytest.mark.asyncio
    async def test_listing_failure_aborts_before_materializing(self, upstream, config):
        upstream.add_page(upstream.release("v2", {"tool": BINARY}))
        upstream.page_status[2] = 502

        with pytest.raises(ListingFetchError):
            await run(config, ["v2", "v1"])

        assert not Path(config.output_dir).exists()
