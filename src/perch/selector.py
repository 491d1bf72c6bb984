"""Output directory selection: which directory of a project is served.

The precedence chain, evaluated once per deployment:

1. an explicit ``outputDirectory`` (present and non-empty) wins, used
   verbatim whether or not it exists;
2. otherwise a top-level directory literally named ``public``;
3. otherwise the project top level.

No recursion into nested ``public`` directories, no validation of the
explicit value unless strict mode is requested. A root that holds no
files is a valid outcome: every request against it is ``NotFound``.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from perch.errors import ConfigurationError
from perch.paths import normalize_prefix
from perch.tree import FileTree

logger = logging.getLogger("perch.selector")

PUBLIC_DIR = "public"


class RootSource(Enum):
    """Which branch of the precedence chain chose the serving root."""

    EXPLICIT = "explicit"
    PUBLIC = "public"
    TOP_LEVEL = "top-level"


@dataclass(frozen=True, slots=True)
class ServingRoot:
    """The single directory of a deployment that is externally reachable.

    ``prefix`` is relative to the project top level; ``""`` is the top
    level itself.
    """

    prefix: str
    source: RootSource

    def __str__(self) -> str:
        return self.prefix or "."


def select_serving_root(
    tree: FileTree,
    output_directory: str | None = None,
    *,
    strict: bool = False,
) -> ServingRoot:
    """Choose the serving root for *tree*.

    Deterministic in its inputs. With *strict* set, an explicit
    ``output_directory`` that holds no files raises ``ConfigurationError``
    instead of yielding a root that answers ``NotFound`` to everything.
    """
    if output_directory:
        prefix = normalize_prefix(output_directory)
        root = ServingRoot(prefix=prefix, source=RootSource.EXPLICIT)
        if not tree.is_dir(prefix):
            if strict:
                msg = f"outputDirectory {output_directory!r} does not contain any files"
                raise ConfigurationError(msg)
            logger.warning(
                "outputDirectory %r does not contain any files; every request will be not found",
                output_directory,
            )
        logger.info("Serving root %r (explicit outputDirectory)", str(root))
        return root

    if tree.is_dir(PUBLIC_DIR):
        root = ServingRoot(prefix=PUBLIC_DIR, source=RootSource.PUBLIC)
        logger.info("Serving root %r (default: top-level %r directory)", str(root), PUBLIC_DIR)
        return root

    root = ServingRoot(prefix="", source=RootSource.TOP_LEVEL)
    logger.info("Serving root %r (default: project top level)", str(root))
    return root
