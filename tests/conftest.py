"""
Shared fixtures: an in-process fake of the GitHub releases API, raw file
hosting and asset download host, served with aiohttp's TestServer.
"""

from __future__ import annotations

import json
import socket
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from spectral_binaries.models.config import PackagerConfig


class FakeUpstream:
    """Serves paginated releases, package.json files and asset bodies."""

    def __init__(self) -> None:
        self.base_url = ""
        self.pages: list[list[dict[str, Any]]] = []
        self.page_requests: list[int] = []
        self.page_status: dict[int, int] = {}
        self.empty_past_end = False
        self.assets: dict[str, bytes] = {}
        self.licenses: dict[str, str] = {}
        self.missing_refs: set[str] = set()
        self.request_headers: list[dict[str, str]] = []

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/api/repos/{owner}/{repo}/releases", self.list_releases)
        app.router.add_get(
            "/api/repos/{owner}/{repo}/releases/latest", self.latest_release
        )
        app.router.add_get("/raw/{owner}/{repo}/{ref}/{path}", self.raw_file)
        app.router.add_get("/assets/{name}", self.asset)
        app.router.add_get("/redirect/{hops}/{name}", self.redirect)
        app.router.add_get("/truncated/{name}", self.truncated)
        app.router.add_get("/status/{code}", self.status)
        return app

    def asset_url(self, name: str) -> str:
        return f"{self.base_url}/assets/{name}"

    def add_page(self, *releases: dict[str, Any]) -> None:
        self.pages.append(list(releases))

    def release(
        self,
        tag: str,
        assets: dict[str, bytes] | None = None,
        name: str | None = None,
        body: str | None = "Release notes",
    ) -> dict[str, Any]:
        """Builds a GitHub-shaped release entry and registers its asset bodies."""
        entries = []
        for asset_name, content in (assets or {}).items():
            self.assets[asset_name] = content
            entries.append(
                {
                    "name": asset_name,
                    "browser_download_url": self.asset_url(asset_name),
                    "size": len(content),
                    "content_type": "application/octet-stream",
                }
            )
        return {
            "tag_name": tag,
            "name": tag if name is None else name,
            "body": body,
            "html_url": f"https://github.com/stoplightio/spectral/releases/tag/{tag}",
            "draft": False,
            "prerelease": False,
            "assets": entries,
        }

    async def list_releases(self, request: web.Request) -> web.Response:
        self.request_headers.append(dict(request.headers))
        page = int(request.query.get("page", "1"))
        self.page_requests.append(page)
        if page in self.page_status:
            return web.Response(status=self.page_status[page])
        if page <= len(self.pages):
            return web.json_response(self.pages[page - 1])
        if self.empty_past_end:
            return web.json_response([])
        return web.json_response({"message": "Not Found"}, status=404)

    async def latest_release(self, request: web.Request) -> web.Response:
        if not self.pages or not self.pages[0]:
            return web.json_response({"message": "Not Found"}, status=404)
        return web.json_response(self.pages[0][0])

    async def raw_file(self, request: web.Request) -> web.Response:
        ref = request.match_info["ref"]
        if ref in self.missing_refs or request.match_info["path"] != "package.json":
            return web.Response(status=404, text="404: Not Found")
        payload = {"name": "@stoplight/spectral-cli", "license": self.licenses.get(ref, "Apache-2.0")}
        return web.Response(text=json.dumps(payload), content_type="text/plain")

    async def asset(self, request: web.Request) -> web.Response:
        name = request.match_info["name"]
        if name not in self.assets:
            return web.Response(status=404)
        return web.Response(body=self.assets[name], content_type="application/octet-stream")

    async def redirect(self, request: web.Request) -> web.Response:
        hops = int(request.match_info["hops"])
        name = request.match_info["name"]
        if hops > 0:
            raise web.HTTPFound(f"/redirect/{hops - 1}/{name}")
        return await self.asset(request)

    async def truncated(self, request: web.Request) -> web.StreamResponse:
        """Announces the full length, sends half the body, then drops the connection."""
        body = self.assets[request.match_info["name"]]
        response = web.StreamResponse()
        response.content_type = "application/octet-stream"
        response.content_length = len(body)
        await response.prepare(request)
        await response.write(body[: len(body) // 2])
        request.transport.close()
        return response

    async def status(self, request: web.Request) -> web.Response:
        return web.Response(status=int(request.match_info["code"]))


@pytest_asyncio.fixture
async def upstream():
    fake = FakeUpstream()
    server = TestServer(fake.build_app())
    await server.start_server()
    fake.base_url = str(server.make_url("/")).rstrip("/")
    try:
        yield fake
    finally:
        await server.close()


@pytest.fixture
def config(upstream: FakeUpstream, tmp_path) -> PackagerConfig:
    return PackagerConfig(
        api_base_url=f"{upstream.base_url}/api",
        raw_base_url=f"{upstream.base_url}/raw",
        output_dir=str(tmp_path / "dist"),
    )


@pytest.fixture
def unused_url() -> str:
    """A URL on a local port nothing listens on."""
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]
    return f"http://127.0.0.1:{port}/asset"
