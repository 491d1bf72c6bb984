"""Deployment: one immutable file tree, serving root and rule set.

Built once, serially, before any request is served. After that it is
read-only and shared by reference across every worker thread and task.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from perch.config import DeploymentConfig
from perch.loader import load_config
from perch.resolution import Resolution
from perch.rewrites import compile_rules
from perch.router import PathRouter
from perch.selector import ServingRoot, select_serving_root
from perch.tree import FileTree, TreeView

logger = logging.getLogger("perch.deployment")


@dataclass(frozen=True, slots=True)
class Deployment:
    """A built deployment, ready to resolve requests.

    Usage::

        deployment = Deployment.from_directory("./my-site")
        deployment.resolve("/about")
    """

    tree: FileTree
    config: DeploymentConfig
    root: ServingRoot
    router: PathRouter = field(repr=False)

    @classmethod
    def build(cls, tree: FileTree, config: DeploymentConfig | None = None) -> "Deployment":
        """Select the serving root and compile the rewrite rules for *tree*.

        Raises ``ConfigurationError`` in strict mode when the explicit
        output directory is empty or a rewrite source is malformed.
        """
        config = config or DeploymentConfig()
        root = select_serving_root(tree, config.output_directory, strict=config.strict)
        rules = compile_rules(config.rewrites, strict=config.strict)
        router = PathRouter(
            tree.scoped(root.prefix),
            rules,
            index=config.index,
            clean_urls=config.clean_urls,
            filesystem_first=config.filesystem_first,
        )
        logger.info(
            "Deployment built: %d files, root %r, %d rewrites",
            len(tree),
            str(root),
            len(rules),
        )
        return cls(tree=tree, config=config, root=root, router=router)

    @classmethod
    def from_directory(
        cls,
        project_dir: str | Path,
        config: DeploymentConfig | None = None,
    ) -> "Deployment":
        """Build a deployment from a project directory on disk.

        When *config* is omitted it is loaded from the directory's
        ``perch.json`` or ``vercel.json``.
        """
        if config is None:
            config = load_config(project_dir)
        return cls.build(FileTree.from_directory(project_dir), config)

    @property
    def view(self) -> TreeView:
        """The file tree as seen from the serving root."""
        return self.router.view

    def resolve(self, request_path: str) -> Resolution:
        """Resolve one normalized request path."""
        return self.router.resolve(request_path)
