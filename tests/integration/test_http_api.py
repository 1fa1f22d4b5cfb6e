"""End-to-end HTTP tests: the aiohttp app driven through pytest-aiohttp.

Each test gets a client for an app built around the per-test
UpdateService, so the updates directory and digest cache are isolated.
"""

from __future__ import annotations

import json
import os
from collections.abc import Awaitable, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient as AiohttpClient

from updatecast.config import ServerSettings
from updatecast.core import digest_cache as digest_cache_module
from updatecast.core.hasher import sha512_hex
from updatecast.core.service import UpdateService
from updatecast.server.app import create_app

ClientFactory = Callable[..., Awaitable[AiohttpClient]]


@pytest_asyncio.fixture
async def client(aiohttp_client: ClientFactory, service: UpdateService) -> AiohttpClient:
    return await aiohttp_client(create_app(service))


@pytest.fixture
def installer(make_artifact: Callable[..., Path]) -> bytes:
    content = os.urandom(1024)
    make_artifact("win32", "x64", content=content)
    return content


class TestLatestJson:
    @pytest.mark.asyncio
    async def test_manifest(self, client: AiohttpClient, installer: bytes):
        resp = await client.get("/updates/latest", params={"platform": "win32", "arch": "x64"})
        assert resp.status == 200
        assert resp.headers["Content-Type"] == "application/json"
        data = json.loads(await resp.read())
        assert data["version"] == "1.2.0"
        assert data["files"][0]["size"] == 1024
        assert data["files"][0]["sha512"] == sha512_hex(installer)
        assert data["files"][0]["url"] == (
            "http://localhost:3000/updates/Product-1.2.0-win32-x64.exe"
        )
        assert data["path"] == "Product-1.2.0-win32-x64.exe"
        assert data["sha512"] == sha512_hex(installer)
        assert data["releaseName"] == "Product v1.2.0"

    @pytest.mark.asyncio
    async def test_defaults_without_query(self, client: AiohttpClient, installer: bytes):
        resp = await client.get("/updates/latest")
        assert resp.status == 200
        assert json.loads(await resp.read())["path"] == "Product-1.2.0-win32-x64.exe"

    @pytest.mark.asyncio
    async def test_unknown_platform_falls_back(self, client: AiohttpClient, installer: bytes):
        resp = await client.get("/updates/latest", params={"platform": "beos", "arch": "sparc"})
        assert resp.status == 200
        assert json.loads(await resp.read())["path"] == "Product-1.2.0-win32-x64.exe"

    @pytest.mark.asyncio
    async def test_missing_artifact_is_404(self, client: AiohttpClient, installer: bytes):
        resp = await client.get("/updates/latest", params={"platform": "linux", "arch": "arm64"})
        assert resp.status == 404
        data = json.loads(await resp.read())
        assert "error" in data
        assert "1.2.0" in data["message"]
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    @pytest.mark.asyncio
    async def test_io_error_is_500_and_not_cached(
        self,
        client: AiohttpClient,
        service: UpdateService,
        installer: bytes,
        monkeypatch: pytest.MonkeyPatch,
    ):
        def _unreadable(*args, **kwargs):
            raise PermissionError("Permission denied")

        monkeypatch.setattr(digest_cache_module, "sha512_file", _unreadable)
        resp = await client.get("/updates/latest")
        assert resp.status == 500
        data = json.loads(await resp.read())
        assert data["error"]
        assert "Permission denied" in data["message"]
        assert len(service.cache) == 0

    @pytest.mark.asyncio
    async def test_artifact_replaced_during_check_is_500(
        self,
        client: AiohttpClient,
        service: UpdateService,
        updates_dir: Path,
        installer: bytes,
        monkeypatch: pytest.MonkeyPatch,
    ):
        path = updates_dir / "Product-1.2.0-win32-x64.exe"
        real_resolve = service.resolver.resolve

        def _resolve_then_replace(*args, **kwargs):
            record = real_resolve(*args, **kwargs)
            path.write_bytes(b"x" * 2048)
            return record

        monkeypatch.setattr(service.resolver, "resolve", _resolve_then_replace)
        resp = await client.get("/updates/latest")
        assert resp.status == 500
        assert "changed" in json.loads(await resp.read())["message"]

        monkeypatch.setattr(service.resolver, "resolve", real_resolve)
        resp = await client.get("/updates/latest")
        data = json.loads(await resp.read())
        assert data["files"][0]["size"] == 2048
        assert data["files"][0]["sha512"] == sha512_hex(b"x" * 2048)

    @pytest.mark.asyncio
    async def test_strict_mode_is_400(
        self, aiohttp_client: ClientFactory, settings: ServerSettings, installer: bytes
    ):
        strict = UpdateService(settings.model_copy(update={"strict_query": True}))
        client = await aiohttp_client(create_app(strict))
        resp = await client.get("/updates/latest", params={"platform": "beos"})
        assert resp.status == 400
        assert "beos" in json.loads(await resp.read())["message"]


class TestLatestYml:
    @pytest.mark.asyncio
    async def test_template(self, client: AiohttpClient, installer: bytes):
        resp = await client.get(
            "/updates/latest.yml", params={"platform": "win32", "arch": "x64"}
        )
        assert resp.status == 200
        assert resp.headers["Content-Type"] == "text/yaml; charset=utf-8"
        lines = (await resp.read()).decode("utf-8").splitlines()
        digest = sha512_hex(installer)
        assert lines[0] == "version: 1.2.0"
        assert lines[1] == "files:"
        assert lines[2] == "  - url: Product-1.2.0-win32-x64.exe"
        assert lines[3] == f"    sha512: {digest}"
        assert lines[4] == "    size: 1024"
        assert lines[5] == "path: Product-1.2.0-win32-x64.exe"
        assert lines[6] == f"sha512: {digest}"
        assert lines[7].startswith("releaseDate: '") and lines[7].endswith("Z'")
        assert lines[8] == "releaseName: 'Product v1.2.0'"
        assert lines[9] == "releaseNotes: 'Online updates, assorted fixes'"

    @pytest.mark.asyncio
    async def test_missing_artifact_is_json_404(self, client: AiohttpClient):
        resp = await client.get(
            "/updates/latest.yml", params={"platform": "linux", "arch": "arm64"}
        )
        assert resp.status == 404
        assert resp.headers["Content-Type"].startswith("application/json")
        assert "error" in json.loads(await resp.read())

    @pytest.mark.asyncio
    async def test_agrees_with_json(
        self, client: AiohttpClient, service: UpdateService, installer: bytes
    ):
        data = json.loads(await (await client.get("/updates/latest")).read())
        yml = await (await client.get("/updates/latest.yml")).read()
        lines = yml.decode("utf-8").splitlines()
        assert lines[0] == f"version: {data['version']}"
        assert f"sha512: {data['sha512']}" in lines
        assert service.cache.stats.computations == 1


class TestDownloads:
    @pytest.mark.asyncio
    async def test_serves_bytes(self, client: AiohttpClient, installer: bytes):
        resp = await client.get("/updates/Product-1.2.0-win32-x64.exe")
        assert resp.status == 200
        assert await resp.read() == installer
        assert resp.headers["Content-Length"] == "1024"
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    @pytest.mark.asyncio
    async def test_missing_file(self, client: AiohttpClient):
        resp = await client.get("/updates/nothing-here.exe")
        assert resp.status == 404
        assert "error" in json.loads(await resp.read())

    @pytest.mark.asyncio
    async def test_nested_name_is_json_404(self, client: AiohttpClient, installer: bytes):
        resp = await client.get("/updates/a/b")
        assert resp.status == 404
        assert resp.headers["Content-Type"].startswith("application/json")
        assert "error" in json.loads(await resp.read())
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    @pytest.mark.asyncio
    async def test_no_escape_from_updates_dir(
        self, client: AiohttpClient, updates_dir: Path, installer: bytes
    ):
        (updates_dir.parent / "secret.txt").write_text("secret")
        resp = await client.get("/updates/..%2Fsecret.txt")
        assert resp.status == 404
        assert await resp.read() != b"secret"


class TestHealthAndCors:
    @pytest.mark.asyncio
    async def test_health_with_missing_updates_dir(
        self, aiohttp_client: ClientFactory, tmp_path: Path
    ):
        service = UpdateService(ServerSettings(updates_dir=tmp_path / "absent"))
        client = await aiohttp_client(create_app(service))
        resp = await client.get("/health")
        assert resp.status == 200
        data = json.loads(await resp.read())
        assert data["status"] == "ok"
        assert data["server"] == "Updatecast Update Server"
        assert data["version"]
        assert data["timestamp"].endswith("Z")
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    @pytest.mark.asyncio
    async def test_cors_headers(self, client: AiohttpClient, installer: bytes):
        resp = await client.get("/updates/latest")
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        assert resp.headers["Access-Control-Allow-Headers"] == (
            "Origin, X-Requested-With, Content-Type, Accept"
        )

    @pytest.mark.asyncio
    async def test_preflight(self, client: AiohttpClient):
        resp = await client.options("/updates/latest")
        assert resp.status == 204
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    @pytest.mark.asyncio
    async def test_unknown_route_is_json_404_with_cors(self, client: AiohttpClient):
        resp = await client.get("/nope")
        assert resp.status == 404
        assert "error" in json.loads(await resp.read())
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
