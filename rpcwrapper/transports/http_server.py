"""
HTTP transport for an RpcWrapper.

Every POST body on the RPC path is handed to the wrapper unchanged; the
wrapper's output is returned as JSON, or as 204 No Content when there is
nothing to send (notifications, batches made only of notifications).

Usage:
    from rpcwrapper import RpcWrapper
    from rpcwrapper.transports.http_server import create_http_app

    app = create_http_app(RpcWrapper(my_service), path="/rpc")
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from rpcwrapper import __version__
from rpcwrapper.wrapper import RpcWrapper

logger = logging.getLogger("rpc-http")


class RequestLoggingMiddleware:
    """
    Logs method, path, status code and duration of every HTTP request.

    Uses the raw ASGI interface so the response body is never buffered.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "")
        path = scope.get("path", "")
        start_time = time.monotonic()
        status_code = 0

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            if path != "/health":
                duration_ms = (time.monotonic() - start_time) * 1000
                logger.info(f"{method} {path} -> {status_code} ({duration_ms:.1f}ms)")


def create_http_app(wrapper: RpcWrapper, path: str = "/rpc", title: str = "rpcwrapper") -> FastAPI:
    """
    Create a FastAPI app exposing ``wrapper`` at ``path``.

    Args:
        wrapper: Dispatcher that handles the raw payloads
        path: Route of the JSON-RPC endpoint (POST only)
        title: OpenAPI title of the app

    Returns:
        FastAPI application
    """
    rpc_path = "/" + path.strip("/")

    app = FastAPI(title=title, description="JSON-RPC 2.0 over HTTP", version=__version__)
    app.add_middleware(RequestLoggingMiddleware)
    app.state.wrapper = wrapper

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post(rpc_path)
    async def handle_rpc(request: Request) -> Response:
        payload = await request.body()
        result = await wrapper.process(payload)
        if result is None:
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        return JSONResponse(status_code=status.HTTP_200_OK, content=result)

    logger.info(f"JSON-RPC endpoint registered at POST {rpc_path}")
    return app
