"""Immutable file trees and serving-root views.

A ``FileTree`` is built once per deployment and never mutated. It maps
normalized relative paths to ``FileRef`` identities; the resolver only
ever asks *whether* a path exists, never what it contains.

A ``TreeView`` scopes a tree to one serving root. Paths outside the
root cannot be expressed through a view, so they are unreachable no
matter what the tree holds.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

from perch.errors import TreePathError
from perch.paths import join, normalize_prefix, normalize_tree_path

logger = logging.getLogger("perch.tree")


@dataclass(frozen=True, slots=True)
class FileRef:
    """Identity of one file in a deployment.

    ``location`` is an opaque content reference: an absolute filesystem
    path for disk-backed trees, or the tree key itself for in-memory
    ones. ``data`` holds the bytes for in-memory files.
    """

    location: str
    data: bytes | None = None

    @property
    def on_disk(self) -> bool:
        return self.data is None and Path(self.location).is_absolute()


class FileTree(Mapping[str, FileRef]):
    """Read-only mapping of normalized relative paths to file identities.

    Usage::

        tree = FileTree.from_paths(["public/index.html", "index.html"])
        tree.is_file("public/index.html")  # True
        tree.is_dir("public")              # True
        view = tree.scoped("public")
        view.is_file("index.html")         # True
    """

    __slots__ = ("_dirs", "_files")

    def __init__(self, entries: Mapping[str, FileRef] | Iterable[tuple[str, FileRef]] = ()) -> None:
        items = entries.items() if isinstance(entries, Mapping) else entries
        files: dict[str, FileRef] = {}
        for path, ref in items:
            files[normalize_tree_path(path)] = ref
        self._files = dict(sorted(files.items()))

        dirs: set[str] = set()
        for path in self._files:
            parts = path.split("/")[:-1]
            for depth in range(1, len(parts) + 1):
                dirs.add("/".join(parts[:depth]))
        self._dirs = frozenset(dirs)

    # -- Constructors --

    @classmethod
    def from_paths(cls, paths: Iterable[str]) -> "FileTree":
        """Build an in-memory tree whose entries carry no bytes."""
        return cls((path, FileRef(location=path)) for path in paths)

    @classmethod
    def from_files(cls, files: Mapping[str, bytes | str]) -> "FileTree":
        """Build an in-memory tree from ``{path: content}``.

        ``str`` content is encoded as UTF-8.
        """
        return cls(
            (path, FileRef(location=path, data=content.encode() if isinstance(content, str) else content))
            for path, content in files.items()
        )

    @classmethod
    def from_directory(cls, directory: str | Path) -> "FileTree":
        """Walk *directory* on disk and build a tree of its regular files.

        Symlinked directories are not descended into. Symlinks that
        resolve outside *directory*, and names that cannot be a tree key
        (a backslash in a POSIX filename, say), are skipped with a warning.
        """
        root = Path(directory).resolve()
        if not root.is_dir():
            return cls()

        entries: list[tuple[str, FileRef]] = []
        for path in sorted(root.rglob("*")):
            if not path.is_file():
                continue
            if not path.resolve().is_relative_to(root):
                logger.warning("Skipping %s: resolves outside %s", path, root)
                continue
            key = path.relative_to(root).as_posix()
            try:
                normalize_tree_path(key)
            except TreePathError as exc:
                logger.warning("Skipping %s: %s", path, exc.reason)
                continue
            entries.append((key, FileRef(location=str(path))))
        return cls(entries)

    # -- Mapping protocol --

    def __getitem__(self, path: str) -> FileRef:
        return self._files[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"FileTree({len(self._files)} files)"

    # -- Queries --

    def is_file(self, path: str) -> bool:
        """Exact, case-sensitive lookup of a tree key."""
        return path in self._files

    def is_dir(self, path: str) -> bool:
        """Whether any file lives below *path*. ``""`` is the top level."""
        prefix = normalize_prefix(path)
        if not prefix:
            return bool(self._files)
        return prefix in self._dirs

    def scoped(self, prefix: str) -> "TreeView":
        """Return a view of the files below *prefix*."""
        return TreeView(self, normalize_prefix(prefix))


@dataclass(frozen=True, slots=True)
class TreeView:
    """A ``FileTree`` seen from one serving root."""

    tree: FileTree
    prefix: str = ""

    def tree_path(self, path: str) -> str:
        """Map a root-relative path to its full tree key."""
        return join(self.prefix, path)

    def get(self, path: str) -> FileRef | None:
        if not path:
            return None
        return self.tree.get(self.tree_path(path))

    def is_file(self, path: str) -> bool:
        return bool(path) and self.tree.is_file(self.tree_path(path))

    def is_empty(self) -> bool:
        """Whether the root holds no files at all."""
        return not self.tree.is_dir(self.prefix)

    def files(self) -> Iterator[str]:
        """Iterate root-relative paths of every file in the view."""
        if not self.prefix:
            yield from self.tree
            return
        lead = self.prefix + "/"
        for path in self.tree:
            if path.startswith(lead):
                yield path[len(lead) :]
