"""ASGI transport adapter.

Translates ``Served`` into a ``200`` carrying the file's bytes and
``NotFound`` into a ``404``. All routing decisions stay in
``perch.router``.
"""

from perch.server.response import Response
from perch.server.sender import send_response
from perch.server.site import StaticSite

__all__ = ["Response", "StaticSite", "send_response"]
