"""Path normalization shared by the file tree, selector and router.

Three flavours of path flow through perch:

- **tree paths** -- keys of a ``FileTree``: relative, ``/``-joined,
  no empty, ``.`` or ``..`` segments (``"public/index.html"``).
- **prefixes** -- a serving root inside the tree (``"public"``, or ``""``
  for the project top level).
- **request paths** -- what the transport layer hands the router, already
  decoded and stripped of query and fragment (``"/about"``).
"""

from perch.errors import TreePathError

ROOT = "/"


def split_segments(path: str) -> list[str]:
    """Split *path* on ``/``, dropping empty and ``.`` segments.

    ``..`` segments are kept; callers decide what they mean.
    """
    return [part for part in path.split("/") if part and part != "."]


def normalize_tree_path(path: str) -> str:
    """Normalize a file tree key.

    Raises ``TreePathError`` for keys that cannot name a file inside the
    tree: empty paths, parent references, backslashes and NUL bytes.
    """
    if "\x00" in path:
        raise TreePathError(path, "contains a NUL byte")
    if "\\" in path:
        raise TreePathError(path, "contains a backslash; use '/' separators")
    segments = split_segments(path)
    if not segments:
        raise TreePathError(path, "does not name a file")
    if ".." in segments:
        raise TreePathError(path, "contains a '..' segment")
    return "/".join(segments)


def normalize_prefix(prefix: str) -> str:
    """Normalize a serving-root prefix.

    ``"."``, ``"./"`` and ``"/"`` all mean the project top level (``""``).
    Parent references are preserved verbatim: a prefix containing ``..``
    can never match a tree key, so it selects an empty root.
    """
    return "/".join(split_segments(prefix.replace("\\", "/")))


def normalize_request_path(path: str) -> str | None:
    """Normalize an incoming request path.

    Collapses repeated slashes and ``.`` segments and drops a trailing
    slash. Returns ``None`` when the path cannot address anything inside a
    serving root.

    Examples::

        "/"               -> "/"
        "//docs/./intro/" -> "/docs/intro"
        "/../etc/passwd"  -> None
    """
    if "\x00" in path or "\\" in path:
        return None
    segments = split_segments(path)
    if ".." in segments:
        return None
    return ROOT + "/".join(segments)


def relative(request_path: str) -> str:
    """Strip the leading slash from a normalized request path."""
    return request_path.lstrip("/")


def join(*parts: str) -> str:
    """Join relative path parts, skipping empty ones."""
    return "/".join(part for part in parts if part)
