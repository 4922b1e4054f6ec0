"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.handlers import (
    handle_health,
    handle_preflight,
    handle_proxy_get,
    handle_proxy_post,
    handle_root,
)
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from services.proxy_service import ProxyService
from services.upstream import UpstreamClient


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    `transport` replaces the network transport of the outbound client.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        upstream = config.upstream
        limits = httpx.Limits(
            max_connections=upstream.max_connections,
            max_keepalive_connections=upstream.max_keepalive_connections,
        )
        client = httpx.AsyncClient(
            timeout=upstream.timeout,
            limits=limits,
            follow_redirects=True,
            max_redirects=upstream.max_redirects,
            transport=transport,
        )
        app.state.proxy_service = ProxyService(
            logger=logger,
            upstream=UpstreamClient(client, timeout=upstream.timeout),
            header_builder=HeaderBuilder(config.upstream, config.cors),
        )
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="CORS Forward Proxy", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        target = request.url.path
        if request.url.query:
            target += f"?{request.url.query}"
        logger.log("http.request", {"method": request.method, "path": target})
        return await call_next(request)

    @app.get("/")
    async def root(request: Request):
        return await handle_root(request)

    @app.get("/health")
    async def health(request: Request):
        return await handle_health(request)

    @app.get("/proxy")
    async def proxy_get(request: Request):
        return await handle_proxy_get(request)

    @app.post("/proxy")
    async def proxy_post(request: Request):
        return await handle_proxy_post(request, config.limits.max_body_size)

    @app.options("/{path:path}")
    async def preflight(request: Request):
        return await handle_preflight(request)

    return app
