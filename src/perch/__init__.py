"""Perch: resolve request paths against a static deployment.

Given a project's file tree, its configuration and a request path, perch
decides which file (if any) to serve: it selects the serving root
(explicit ``outputDirectory``, else ``public/``, else the top level),
applies the first matching rewrite rule, and looks the result up
exactly.

Basic usage::

    from perch import Deployment

    deployment = Deployment.from_directory("./my-site")
    result = deployment.resolve("/about")
    if result.found:
        print(result.tree_path)

Serving over ASGI (``pip install perch[serve]`` for ``perch serve``)::

    from perch.server import StaticSite
    app = StaticSite(deployment)
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "Deployment",
    "DeploymentConfig",
    "FileRef",
    "FileTree",
    "NotFound",
    "PathRouter",
    "PatternError",
    "PerchError",
    "RewriteRule",
    "Served",
    "ServingRoot",
    "TreePathError",
    "load_config",
    "select_serving_root",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "Deployment":
        from perch.deployment import Deployment

        return Deployment

    if name == "DeploymentConfig":
        from perch.config import DeploymentConfig

        return DeploymentConfig

    if name == "load_config":
        from perch.loader import load_config

        return load_config

    if name in ("FileRef", "FileTree"):
        from perch import tree as _tree

        return getattr(_tree, name)

    if name in ("Served", "NotFound"):
        from perch import resolution as _resolution

        return getattr(_resolution, name)

    if name == "PathRouter":
        from perch.router import PathRouter

        return PathRouter

    if name == "RewriteRule":
        from perch.rewrites import RewriteRule

        return RewriteRule

    if name in ("ServingRoot", "select_serving_root"):
        from perch import selector as _selector

        return getattr(_selector, name)

    if name in ("PerchError", "ConfigurationError", "PatternError", "TreePathError"):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
