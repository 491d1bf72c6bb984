"""Deployment configuration.

DeploymentConfig is a frozen dataclass: immutable after creation,
IDE-autocompletable, no string-key dict lookups. ``perch.loader`` builds
one from a ``perch.json`` / ``vercel.json`` file.
"""

from dataclasses import dataclass

from perch.rewrites import RewriteRule


@dataclass(frozen=True, slots=True)
class DeploymentConfig:
    """Configuration for one deployment. Immutable after creation.

    All fields have defaults. Override what you need::

        config = DeploymentConfig(
            output_directory="dist",
            rewrites=(RewriteRule("/(.*)", "/index.html"),),
        )
    """

    # Serving root: None or "" means default discovery (public/, then top level)
    output_directory: str | None = None

    # Carried for the build collaborator; never interpreted here
    build_command: str | None = None
    framework: str | None = None

    # Rewrites, evaluated in this order, first match wins
    rewrites: tuple[RewriteRule, ...] = ()

    # Lookup
    index: str = "index.html"
    clean_urls: bool = False  # "/about" also tries "about.html"
    filesystem_first: bool = False  # Serve existing files before consulting rewrites

    # Fail the deployment on a missing outputDirectory or malformed rewrite
    # instead of answering 404 to everything
    strict: bool = False

    # Served with a 404 status by the ASGI adapter when present under the root
    not_found_page: str | None = "404.html"
