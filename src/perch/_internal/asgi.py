"""Typed ASGI definitions.

Raw ASGI aliases plus a typed view of the few scope fields the static
site reads. Users never see these.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from dataclasses import dataclass
from typing import Any, TypeAlias

# Raw ASGI types, as defined by the ASGI 3 interface
Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class HTTPScope:
    """Typed HTTP scope parsed from raw ASGI scope dict."""

    method: str
    path: str
    root_path: str
    headers: tuple[tuple[bytes, bytes], ...]

    @classmethod
    def from_scope(cls, scope: Scope) -> "HTTPScope":
        """Parse raw ASGI scope into typed object.

        ``path`` is already percent-decoded by the server. A ``root_path``
        prefix (application mounted below ``/``) is stripped from it.
        """
        root_path = scope.get("root_path", "")
        path = scope["path"]
        if root_path and (path == root_path or path.startswith(root_path.rstrip("/") + "/")):
            path = path[len(root_path.rstrip("/")) :] or "/"
        return cls(
            method=scope["method"],
            path=path,
            root_path=root_path,
            headers=tuple(scope.get("headers", ())),
        )
