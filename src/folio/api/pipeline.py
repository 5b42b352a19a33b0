"""Request pipeline: an ordered list of gates evaluated by a driver loop.

Every request runs through the same gates in the same order.  A gate is an
async callable ``(request, context) -> Response | None``; returning a
response ends the request and no later gate runs.  Returning ``None`` passes
control to the next gate.

Default gate order (see :func:`folio.api.main.create_app`):

1. :func:`method_gate` -- 405 for anything but GET/HEAD.
2. :func:`uri_length_gate` -- 414 for request paths over the limit.
3. :func:`route_dispatch` -- ``/og.png`` and ``/sitemap.xml``.
4. :func:`traversal_gate` -- 403 when the path escapes the asset root.
5. :func:`static_asset_handler` -- the file, or 404.

The driver, :class:`RequestPipeline`, adds :data:`SECURITY_HEADERS` to
whatever response it ends up with, including 404 fall-through and 500s from
exceptions that escape a gate.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass

from fastapi import Request
from fastapi.responses import FileResponse, PlainTextResponse, Response
from starlette.types import Receive, Scope, Send

from folio.api.asset_store import AssetStore

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

ALLOWED_METHODS = ("GET", "HEAD")


@dataclass
class RequestContext:
    """Per-request state shared between gates.

    Attributes:
        path: Percent-decoded request path.
        raw_path: Request path exactly as sent, without the query string.
        asset_path: Absolute file path accepted by the traversal gate.
    """

    path: str
    raw_path: str
    asset_path: str | None = None

    @classmethod
    def from_request(cls, request: Request) -> RequestContext:
        path = request.scope["path"]
        raw = request.scope.get("raw_path")
        raw_path = raw.decode("latin-1").split("?", 1)[0] if raw else path
        return cls(path=path, raw_path=raw_path)


Gate = Callable[[Request, RequestContext], Awaitable[Response | None]]
Handler = Callable[[Request], Awaitable[Response]]


def error_response(status_code: int, message: str, headers: Mapping[str, str] | None = None) -> Response:
    """Plain-text error body.  Never includes exception detail."""
    return PlainTextResponse(message, status_code=status_code, headers=headers)


async def method_gate(request: Request, context: RequestContext) -> Response | None:
    if request.method not in ALLOWED_METHODS:
        return error_response(405, "Method Not Allowed", {"Allow": ", ".join(ALLOWED_METHODS)})
    return None


def uri_length_gate(max_length: int) -> Gate:
    """Reject request paths longer than ``max_length`` characters with 414."""

    async def gate(request: Request, context: RequestContext) -> Response | None:
        if len(context.raw_path) > max_length:
            return error_response(414, "URI Too Long")
        return None

    return gate


def route_dispatch(routes: Mapping[str, Handler]) -> Gate:
    """Hand exact-match paths to their generator handlers."""

    async def gate(request: Request, context: RequestContext) -> Response | None:
        handler = routes.get(context.path)
        if handler is None:
            return None
        return await handler(request)

    return gate


def traversal_gate(store: AssetStore) -> Gate:
    """Resolve the path under the asset root and reject escapes with 403."""

    async def gate(request: Request, context: RequestContext) -> Response | None:
        candidate = store.resolve(context.path)
        if not store.contains(candidate):
            return error_response(403, "Forbidden")
        context.asset_path = candidate
        return None

    return gate


def static_asset_handler(store: AssetStore) -> Gate:
    """Serve the file accepted by :func:`traversal_gate`, or 404.

    The file is stat'ed here rather than when the response is sent, so a file
    removed after lookup becomes a 404 that still passes through the driver.
    """

    async def gate(request: Request, context: RequestContext) -> Response | None:
        found = store.find(context.asset_path) if context.asset_path else None
        if found is None:
            return error_response(404, "Not Found")
        try:
            stat_result = os.stat(found)
        except (FileNotFoundError, NotADirectoryError):
            return error_response(404, "Not Found")
        return FileResponse(found, stat_result=stat_result)

    return gate


class RequestPipeline:
    """Drive a request through an ordered list of gates.

    The instance is an ASGI application, so it can be mounted as the single
    catch-all route.  Starlette does not apply a method filter to ASGI
    endpoints; the method gate sees every verb.

    Args:
        gates: Gates in evaluation order.
    """

    def __init__(self, gates: Sequence[Gate]) -> None:
        self.gates = tuple(gates)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = await self.handle(Request(scope, receive))
        await response(scope, receive, send)

    async def handle(self, request: Request) -> Response:
        """Produce exactly one response for ``request``."""
        context = RequestContext.from_request(request)
        try:
            response = await self._run(request, context)
        except Exception as e:
            logger.error(f"Unhandled error for {request.method} {context.path}: {e}", exc_info=True)
            response = error_response(500, "Internal Server Error")
        response.headers.update(SECURITY_HEADERS)
        return response

    async def _run(self, request: Request, context: RequestContext) -> Response:
        for gate in self.gates:
            response = await gate(request, context)
            if response is not None:
                return response
        return error_response(404, "Not Found")
