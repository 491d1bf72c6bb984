"""Tests for perch.server — the ASGI adapter over a Deployment."""

import pytest

from perch._internal.asgi import HTTPScope
from perch.config import DeploymentConfig
from perch.deployment import Deployment
from perch.rewrites import RewriteRule
from perch.server import Response, StaticSite
from perch.testing import TestClient
from perch.tree import FileTree

SPA = RewriteRule("/(.*)", "/index.html")


@pytest.fixture
def project(tmp_path):
    """A project on disk with a public/ directory."""
    public = tmp_path / "public"
    (public / "assets").mkdir(parents=True)
    (public / "index.html").write_text("<h1>Home</h1>")
    (public / "404.html").write_text("<h1>Lost</h1>")
    (public / "assets" / "app.js").write_text("console.log('hi');")
    (public / "assets" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (tmp_path / "index.html").write_text("<h1>Top level</h1>")
    return tmp_path


class TestServing:
    async def test_serves_index(self, project) -> None:
        app = StaticSite(Deployment.from_directory(project))
        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.text == "<h1>Home</h1>"
        assert response.content_type.startswith("text/html")
        assert response.header("cache-control") == "public, max-age=0, must-revalidate"

    async def test_serves_binary(self, project) -> None:
        app = StaticSite(Deployment.from_directory(project))
        async with TestClient(app) as client:
            response = await client.get("/assets/logo.png")
        assert response.status == 200
        assert response.content_type == "image/png"
        assert response.body == b"\x89PNG\r\n\x1a\n"

    async def test_query_string_ignored(self, project) -> None:
        app = StaticSite(Deployment.from_directory(project))
        async with TestClient(app) as client:
            response = await client.get("/assets/app.js?v=3")
        assert response.status == 200
        assert "console.log" in response.text

    async def test_in_memory_tree(self) -> None:
        tree = FileTree.from_files({"index.html": "<p>mem</p>"})
        app = StaticSite(Deployment.build(tree))
        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.text == "<p>mem</p>"

    async def test_spa_fallback(self, project) -> None:
        deployment = Deployment.from_directory(project, DeploymentConfig(rewrites=(SPA,)))
        async with TestClient(StaticSite(deployment)) as client:
            response = await client.get("/settings/profile")
        assert response.status == 200
        assert response.text == "<h1>Home</h1>"


class TestNotFound:
    async def test_custom_page(self, project) -> None:
        app = StaticSite(Deployment.from_directory(project))
        async with TestClient(app) as client:
            response = await client.get("/missing")
        assert response.status == 404
        assert response.text == "<h1>Lost</h1>"

    async def test_plain_body_without_page(self, project) -> None:
        (project / "public" / "404.html").unlink()
        app = StaticSite(Deployment.from_directory(project))
        async with TestClient(app) as client:
            response = await client.get("/missing")
        assert response.status == 404
        assert response.text == "Not Found"

    async def test_page_disabled(self, project) -> None:
        deployment = Deployment.from_directory(project, DeploymentConfig(not_found_page=None))
        async with TestClient(StaticSite(deployment)) as client:
            response = await client.get("/missing")
        assert response.text == "Not Found"

    async def test_missing_output_directory(self, project) -> None:
        config = DeploymentConfig(output_directory="dist")
        async with TestClient(StaticSite(Deployment.from_directory(project, config))) as client:
            for path in ("/", "/index.html", "/assets/app.js"):
                response = await client.get(path)
                assert response.status == 404

    async def test_traversal(self, project) -> None:
        app = StaticSite(Deployment.from_directory(project))
        async with TestClient(app) as client:
            response = await client.get("/../index.html")
        assert response.status == 404


class TestMethods:
    async def test_head_has_no_body(self, project) -> None:
        app = StaticSite(Deployment.from_directory(project))
        async with TestClient(app) as client:
            response = await client.head("/")
        assert response.status == 200
        assert response.body == b""
        assert response.header("content-length") == str(len("<h1>Home</h1>"))

    async def test_post_not_allowed(self, project) -> None:
        app = StaticSite(Deployment.from_directory(project))
        async with TestClient(app) as client:
            response = await client.post("/", body=b"x")
        assert response.status == 405
        assert response.header("allow") == "GET, HEAD"


class TestLifespan:
    async def test_startup_and_shutdown(self, project) -> None:
        client = TestClient(StaticSite(Deployment.from_directory(project)))
        async with client:
            pass
        assert client._lifespan_messages == ["lifespan.startup.complete", "lifespan.shutdown.complete"]

    async def test_shutdown_waits_for_exit(self, project) -> None:
        client = TestClient(StaticSite(Deployment.from_directory(project)))
        async with client:
            assert client._lifespan_messages == ["lifespan.startup.complete"]
            response = await client.get("/")
            assert response.status == 200

    async def test_rejects_websocket(self, project) -> None:
        app = StaticSite(Deployment.from_directory(project))

        async def receive() -> dict:
            return {}

        async def send(message: dict) -> None:
            pass

        with pytest.raises(RuntimeError, match="websocket"):
            await app({"type": "websocket"}, receive, send)


class TestResponse:
    def test_with_header_is_immutable(self) -> None:
        base = Response(body="x")
        changed = base.with_header("X-Test", "1")
        assert base.headers == ()
        assert changed.header("x-test") == "1"

    def test_body_bytes(self) -> None:
        assert Response(body="é").body_bytes == "é".encode()


class TestContainment:
    async def test_symlink_outside_project_not_served(self, project, tmp_path_factory) -> None:
        outside = tmp_path_factory.mktemp("outside") / "secret.txt"
        outside.write_text("TOP SECRET")
        (project / "public" / "leak.txt").symlink_to(outside)

        deployment = Deployment.from_directory(project)
        assert not deployment.resolve("/leak.txt").found

        async with TestClient(StaticSite(deployment)) as client:
            response = await client.get("/leak.txt")
        assert response.status == 404
        assert "TOP SECRET" not in response.text


class TestRootPath:
    def test_strips_mount_prefix(self) -> None:
        scope = {"method": "GET", "path": "/app/about", "root_path": "/app"}
        assert HTTPScope.from_scope(scope).path == "/about"

    def test_mount_point_itself(self) -> None:
        scope = {"method": "GET", "path": "/app", "root_path": "/app"}
        assert HTTPScope.from_scope(scope).path == "/"

    def test_respects_segment_boundary(self) -> None:
        scope = {"method": "GET", "path": "/apple", "root_path": "/app"}
        assert HTTPScope.from_scope(scope).path == "/apple"
