"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from api.handlers import ForwardEndpoint
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from services.forwarding_service import ForwardingService
from services.upstream import UpstreamClient


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        header_builder = HeaderBuilder()
        # Shared read-only; no per-request configuration.
        client = httpx.AsyncClient(
            timeout=None,
            follow_redirects=True,
            transport=transport,
        )
        app.state.upstream_client = UpstreamClient(
            client,
            header_builder,
            chunk_size=config.forward.chunk_size,
        )
        app.state.forwarding_service = ForwardingService(header_builder)
        try:
            yield
        finally:
            await client.aclose()

    # Docs routes would shadow forwardable paths.
    app = FastAPI(
        title="Path Proxy",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # An ASGI endpoint with methods=None accepts every HTTP method.
    app.add_route(
        "/{path:path}",
        ForwardEndpoint(config, logger),
        methods=None,
        include_in_schema=False,
    )

    return app
