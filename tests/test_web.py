from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.templating import Jinja2Templates
from fastapi.testclient import TestClient

from tests._fixtures.manifests import DEV_SERVER
from vitetags.application.vite import Vite
from vitetags.web.main import TEMPLATE_DIR, create_application
from vitetags.web.templating import register_vite


@pytest.fixture
def vite() -> Vite:
    return Vite(entry_points=["main.js"])


@pytest.fixture
def client(project: Path, vite: Vite):
    with TestClient(create_application(vite=vite)) as test_client:
        yield test_client


class TestPages:
    def test_index_renders_production_tags(self, client: TestClient) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert '<link rel="modulepreload" as="script" href="/build/assets/main-abc123.js" />' in (
            response.text
        )
        assert '<script type="module" src="/build/assets/main-abc123.js"></script>' in response.text
        assert "@vite/client" not in response.text
        assert "RefreshRuntime" not in response.text

    def test_client_side_routes_share_the_index(self, client: TestClient) -> None:
        response = client.get("/dashboard/settings")

        assert response.status_code == 200
        assert 'data-path="dashboard/settings"' in response.text
        assert "/build/assets/main-abc123.js" in response.text

    def test_each_page_starts_with_an_empty_registry(self, client: TestClient, vite: Vite) -> None:
        client.get("/")
        client.get("/")

        assert list(vite.preloaded_assets) == [
            "/build/assets/main-abc123.js",
            "/build/assets/vendor-def456.js",
            "/build/assets/main-abc123.css",
        ]

    def test_hot_mode(self, hot_project: Path, client: TestClient) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert f'<script type="module" src="{DEV_SERVER}/@vite/client"></script>' in response.text
        assert f'<script type="module" src="{DEV_SERVER}/main.js"></script>' in response.text
        assert "RefreshRuntime" in response.text
        assert "modulepreload" not in response.text

    def test_missing_manifest_is_unavailable(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, vite: Vite
    ) -> None:
        monkeypatch.chdir(tmp_path)

        with TestClient(create_application(vite=vite)) as test_client:
            response = test_client.get("/")

        assert response.status_code == 503
        assert "frontend build" in response.json()["detail"]

    def test_built_assets_are_served(self, project: Path, client: TestClient) -> None:
        asset = project / "build" / "assets" / "main-abc123.js"
        asset.parent.mkdir(parents=True, exist_ok=True)
        asset.write_text("console.log('main')", encoding="utf-8")

        response = client.get("/build/assets/main-abc123.js")

        assert response.status_code == 200
        assert response.text == "console.log('main')"


class TestViteApi:
    def test_manifest_hash(self, client: TestClient, vite: Vite) -> None:
        response = client.get("/api/vite/manifest-hash")

        assert response.status_code == 200
        assert response.json() == {"hot": False, "hash": vite.manifest_hash()}
        assert len(response.json()["hash"]) == 32

    def test_manifest_hash_when_hot(self, hot_project: Path, client: TestClient) -> None:
        assert client.get("/api/vite/manifest-hash").json() == {"hot": True, "hash": None}

    def test_preloaded_assets_reflect_the_last_render(self, client: TestClient) -> None:
        client.get("/")

        assets = client.get("/api/vite/preloaded").json()["assets"]

        assert assets["/build/assets/main-abc123.css"]["rel"] == "preload"
        assert assets["/build/assets/main-abc123.css"]["as"] == "style"
        assert "href" not in assets["/build/assets/main-abc123.js"]

    def test_asset_url(self, client: TestClient) -> None:
        response = client.get("/api/vite/assets/style.css")

        assert response.status_code == 200
        assert response.json() == {"asset": "style.css", "url": "/build/assets/style-ghi789.css"}

    def test_unknown_asset(self, client: TestClient) -> None:
        response = client.get("/api/vite/assets/missing.js")

        assert response.status_code == 404
        assert "missing.js" in response.json()["detail"]

    def test_asset_without_manifest_is_unavailable(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, vite: Vite
    ) -> None:
        monkeypatch.chdir(tmp_path)

        with TestClient(create_application(vite=vite)) as test_client:
            response = test_client.get("/api/vite/assets/main.js")

        assert response.status_code == 503
        assert response.json()["detail"] == (
            "The frontend build manifest is unavailable. Run the frontend build first."
        )


class TestTemplating:
    def test_csp_nonce_is_read_at_render_time(self) -> None:
        vite = Vite()
        templates = register_vite(Jinja2Templates(directory=str(TEMPLATE_DIR)), vite)
        template = templates.env.from_string('<style nonce="{{ csp_nonce() }}"></style>')

        assert template.render() == '<style nonce=""></style>'

        nonce = vite.use_csp_nonce()

        assert template.render() == f'<style nonce="{nonce}"></style>'

    def test_vite_tags_renders_named_entries(self, project: Path) -> None:
        vite = Vite()
        templates = register_vite(Jinja2Templates(directory=str(TEMPLATE_DIR)), vite)

        html = templates.env.from_string("{{ vite_tags('style.css') }}").render()

        assert html == (
            '<link rel="preload" as="style" href="/build/assets/style-ghi789.css" />'
            '<link rel="stylesheet" href="/build/assets/style-ghi789.css" />'
        )
