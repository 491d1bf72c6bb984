"""Perch exception hierarchy.

Shared across the selector, router, loader and server so every module
raises and catches the same types.

A request that resolves to nothing is *not* an error: the router returns
a ``NotFound`` value (see ``perch.resolution``).  Exceptions here are
reserved for configuration that cannot be loaded at all, or that strict
mode refuses to accept.
"""


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when deployment configuration is invalid.

    Typically raised while loading ``perch.json`` or, in strict mode,
    while building a ``Deployment``.
    """


class PatternError(ConfigurationError):
    """A rewrite source pattern could not be compiled."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid rewrite source {source!r}: {reason}")


class TreePathError(PerchError, ValueError):
    """A file tree key cannot be normalized into a relative path."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid tree path {path!r}: {reason}")
