"""Tests for perch.deployment — selector, rules and router composed."""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from perch.config import DeploymentConfig
from perch.deployment import Deployment
from perch.errors import ConfigurationError, PatternError
from perch.resolution import NotFound, Served
from perch.rewrites import RewriteRule
from perch.selector import RootSource
from perch.tree import FileTree

SPA = RewriteRule("/(.*)", "/index.html")


@pytest.fixture
def both() -> FileTree:
    """Top-level index.html plus public/index.html."""
    return FileTree.from_paths(["index.html", "public/index.html", "public/about/index.html"])


class TestPrecedence:
    def test_default_discovery_prefers_public(self, both: FileTree) -> None:
        deployment = Deployment.build(both)
        assert deployment.root.prefix == "public"
        result = deployment.resolve("/")
        assert isinstance(result, Served)
        assert result.tree_path == "public/index.html"

    def test_explicit_root_overrides_public(self, both: FileTree) -> None:
        deployment = Deployment.build(both, DeploymentConfig(output_directory="."))
        assert deployment.root.source is RootSource.EXPLICIT
        result = deployment.resolve("/")
        assert isinstance(result, Served)
        assert result.tree_path == "index.html"

    def test_explicit_missing_directory_is_blanket_not_found(self, both: FileTree) -> None:
        config = DeploymentConfig(output_directory="dist", rewrites=(SPA,))
        deployment = Deployment.build(both, config)
        for path in ("/", "/index.html", "/about", "/public/index.html"):
            assert isinstance(deployment.resolve(path), NotFound)

    def test_strict_missing_directory_fails_build(self, both: FileTree) -> None:
        config = DeploymentConfig(output_directory="dist", strict=True)
        with pytest.raises(ConfigurationError):
            Deployment.build(both, config)

    def test_strict_malformed_rewrite_fails_build(self, both: FileTree) -> None:
        config = DeploymentConfig(rewrites=(RewriteRule("/(", "/index.html"),), strict=True)
        with pytest.raises(PatternError):
            Deployment.build(both, config)

    def test_lax_malformed_rewrite_is_inert(self, both: FileTree) -> None:
        config = DeploymentConfig(rewrites=(RewriteRule("/(", "/index.html"),))
        deployment = Deployment.build(both, config)
        assert isinstance(deployment.resolve("/missing"), NotFound)
        assert isinstance(deployment.resolve("/"), Served)


class TestSpaFallback:
    def test_wildcard(self) -> None:
        tree = FileTree.from_paths(["index.html"])
        deployment = Deployment.build(tree, DeploymentConfig(rewrites=(SPA,)))
        for path in ("/", "/about", "/deeply/nested/path"):
            result = deployment.resolve(path)
            assert isinstance(result, Served)
            assert result.path == "index.html"

    def test_no_fallback(self) -> None:
        deployment = Deployment.build(FileTree.from_paths(["index.html"]))
        assert isinstance(deployment.resolve("/about"), NotFound)
        assert isinstance(deployment.resolve("/index.html"), Served)

    def test_case_sensitive(self) -> None:
        deployment = Deployment.build(FileTree.from_paths(["index.html"]))
        assert isinstance(deployment.resolve("/Index.html"), NotFound)


class TestFromDirectory:
    def test_loads_config_file(self, tmp_path) -> None:
        (tmp_path / "dist").mkdir()
        (tmp_path / "dist" / "index.html").write_text("<h1>App</h1>")
        (tmp_path / "perch.json").write_text(
            json.dumps(
                {
                    "outputDirectory": "dist",
                    "buildCommand": None,
                    "framework": None,
                    "rewrites": [{"source": "/(.*)", "destination": "/index.html"}],
                }
            )
        )

        deployment = Deployment.from_directory(tmp_path)

        assert deployment.root.prefix == "dist"
        assert deployment.config.rewrites == (SPA,)
        result = deployment.resolve("/settings/profile")
        assert isinstance(result, Served)
        assert result.file.location == str((tmp_path / "dist" / "index.html").resolve())

    def test_explicit_config_skips_file(self, tmp_path) -> None:
        (tmp_path / "index.html").write_text("home")
        (tmp_path / "perch.json").write_text("not json")
        deployment = Deployment.from_directory(tmp_path, DeploymentConfig())
        assert isinstance(deployment.resolve("/"), Served)

    def test_bad_config_file(self, tmp_path) -> None:
        (tmp_path / "perch.json").write_text("not json")
        with pytest.raises(ConfigurationError, match="invalid JSON"):
            Deployment.from_directory(tmp_path)


class TestConcurrency:
    def test_parallel_resolutions_agree(self) -> None:
        tree = FileTree.from_paths(["index.html", "app.js", "docs/index.html"])
        deployment = Deployment.build(
            tree,
            DeploymentConfig(rewrites=(RewriteRule("/app/(.*)", "/index.html"),)),
        )
        paths = ["/", "/app.js", "/docs", "/app/x/y", "/nope", "/../etc"] * 50
        expected = [deployment.resolve(path) for path in paths]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(deployment.resolve, paths))

        assert results == expected


class TestDeploymentObject:
    def test_frozen(self, both: FileTree) -> None:
        deployment = Deployment.build(both)
        with pytest.raises(AttributeError):
            deployment.root = None  # type: ignore[misc]

    def test_view_scoped_to_root(self, both: FileTree) -> None:
        deployment = Deployment.build(both)
        assert sorted(deployment.view.files()) == ["about/index.html", "index.html"]
