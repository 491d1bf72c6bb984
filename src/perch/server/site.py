"""StaticSite: an ASGI application serving one ``Deployment``.

Serves ``GET`` and ``HEAD`` only. Every path goes through
``Deployment.resolve``; this module only turns the result into bytes
and a status code.

Usage::

    deployment = Deployment.from_directory("./my-site")
    app = StaticSite(deployment)
    # uvicorn.run(app)
"""

import logging
import mimetypes

import anyio

from perch._internal.asgi import HTTPScope, Receive, Scope, Send
from perch.deployment import Deployment
from perch.resolution import NotFound, Served
from perch.server.response import Response
from perch.server.sender import send_response
from perch.tree import FileRef

logger = logging.getLogger("perch.server")

ALLOWED_METHODS = ("GET", "HEAD")


async def read_file(ref: FileRef) -> bytes:
    """Load the bytes behind a file identity."""
    if ref.data is not None:
        return ref.data
    return await anyio.Path(ref.location).read_bytes()


def guess_content_type(path: str) -> str:
    content_type, _ = mimetypes.guess_type(path)
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/") or content_type in ("application/javascript", "application/json"):
        return f"{content_type}; charset=utf-8"
    return content_type


class StaticSite:
    """ASGI application for one deployment.

    ``Served`` becomes ``200`` with the file's bytes; ``NotFound``
    becomes ``404``, with the deployment's not-found page as the body
    when the serving root holds one.
    """

    __slots__ = ("_cache_control", "deployment")

    def __init__(
        self,
        deployment: Deployment,
        *,
        cache_control: str = "public, max-age=0, must-revalidate",
    ) -> None:
        self.deployment = deployment
        self._cache_control = cache_control

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            msg = f"StaticSite cannot handle {scope['type']!r} scopes"
            raise RuntimeError(msg)

        http = HTTPScope.from_scope(scope)
        response = await self.respond(http.method, http.path)
        await send_response(response, send, head=http.method == "HEAD")

    async def respond(self, method: str, path: str) -> Response:
        """Build the response for one request."""
        if method not in ALLOWED_METHODS:
            return Response(body="Method Not Allowed", status=405).with_header(
                "Allow", ", ".join(ALLOWED_METHODS)
            )

        result = self.deployment.resolve(path)
        if isinstance(result, Served):
            body = await read_file(result.file)
            logger.debug("%s %s -> 200 %s", method, path, result.tree_path)
            return Response(
                body=body,
                content_type=guess_content_type(result.path),
            ).with_header("Cache-Control", self._cache_control)

        return await self._not_found(method, path, result)

    async def _not_found(self, method: str, path: str, result: NotFound) -> Response:
        logger.debug("%s %s -> 404 (lookup %s)", method, path, result.path)
        page = self.deployment.config.not_found_page
        ref = self.deployment.view.get(page) if page else None
        if ref is None:
            return Response(body="Not Found", status=404)
        body = await read_file(ref)
        return Response(body=body, status=404, content_type=guess_content_type(page))

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                logger.info(
                    "Serving %d files from root %r",
                    len(self.deployment.tree),
                    str(self.deployment.root),
                )
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
