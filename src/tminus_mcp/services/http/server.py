from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...api.errors import RPC_METHOD_NOT_FOUND
from ..context import McpContext

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}

NOT_FOUND_BODY = {
    "jsonrpc": "2.0",
    "error": {"code": RPC_METHOD_NOT_FOUND, "message": "Not Found"},
    "id": None,
}


def create_app(context: Optional[McpContext] = None) -> FastAPI:
    context = context or McpContext()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        await context.startup()
        try:
            yield
        finally:
            await context.shutdown()

    # interactive docs are only served outside production
    production = context.settings.server.is_production
    app = FastAPI(
        title="T-Minus MCP",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None if production else "/docs",
        redoc_url=None,
        openapi_url=None if production else "/openapi.json",
    )
    app.state.context = context
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(context.settings.server.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
        max_age=86400,
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code in (404, 405):
            return JSONResponse(NOT_FOUND_BODY, status_code=404)
        return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)

    @app.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse({"ok": True, "status": "healthy"})

    @app.post("/mcp")
    async def mcp_endpoint(request: Request) -> JSONResponse:
        body = await request.body()
        status, payload = await context.server.handle(body, request.headers.get("authorization"))
        return JSONResponse(payload, status_code=status)

    @app.options("/{path:path}")
    async def preflight(path: str) -> Response:
        return Response(status_code=204)

    return app


def run_server(host: str = "127.0.0.1", port: int = 8787, context: Optional[McpContext] = None) -> None:
    import asyncio
    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    config = Config()
    config.bind = [f"{host}:{port}"]
    logger.info("Serving MCP on http://%s:%d/mcp", host, port)
    asyncio.run(serve(create_app(context), config))
