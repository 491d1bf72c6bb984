"""Resolution results: ``Served`` or ``NotFound``.

Both are plain values. ``NotFound`` is the expected outcome for a path
nothing answers to, so it is returned, never raised.
"""

from dataclasses import dataclass
from typing import TypeAlias

from perch.rewrites import RewriteRule
from perch.tree import FileRef


@dataclass(frozen=True, slots=True)
class Served:
    """A request resolved to a file under the serving root.

    ``path`` is relative to the serving root, ``tree_path`` is the full
    key in the deployment's ``FileTree``. ``rule`` is the rewrite that
    produced the lookup path, if any.
    """

    path: str
    tree_path: str
    file: FileRef
    rule: RewriteRule | None = None

    @property
    def found(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class NotFound:
    """Nothing under the serving root answers to the request.

    ``path`` is the effective lookup path (after any rewrite), or the raw
    request path when it could not be normalized.
    """

    path: str
    rule: RewriteRule | None = None

    @property
    def found(self) -> bool:
        return False


Resolution: TypeAlias = Served | NotFound
