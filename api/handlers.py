"""FastAPI route handlers."""

import html
import logging

from fastapi import Request, Response
from starlette.types import Receive, Scope, Send

from core.config import Config
from core.exceptions import InvalidTargetURL, ProxyError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from ui.log_utils import write_forward_log

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def plain_error(message: str, status_code: int) -> Response:
    """Plain-text error response with the CORS headers."""
    return Response(
        content=message + "\n",
        status_code=status_code,
        headers={
            **dict(HeaderBuilder().cors_headers()),
            "X-Content-Type-Options": "nosniff",
        },
        media_type="text/plain; charset=utf-8",
    )


def internal_server_error(err: Exception, request_logger: RequestLogger) -> Response:
    """Log ``err`` server-side and answer with a generic 500."""
    logger.error("Internal server error: %s", err)
    request_logger.log_error("forward", 500, str(err))
    return plain_error(INTERNAL_ERROR_MESSAGE, 500)


def _redirect(url: str) -> Response:
    return Response(
        content=f'<a href="{html.escape(url)}">Moved Permanently</a>.\n',
        status_code=301,
        headers={**dict(HeaderBuilder().cors_headers()), "Location": url},
        media_type="text/html; charset=utf-8",
    )


async def handle_forward(
    request: Request,
    config: Config,
    request_logger: RequestLogger,
) -> Response:
    """Forward the request to the URL embedded in its path."""
    try:
        return await _forward(request, config, request_logger)
    except Exception as e:
        logger.exception("Forward handler fault")
        request_logger.log_error("handler", 500, repr(e))
        return plain_error(f"internal server error: {e}", 500)


async def _forward(
    request: Request,
    config: Config,
    request_logger: RequestLogger,
) -> Response:
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=dict(HeaderBuilder().cors_headers()))

    path = request.scope["path"]
    if path == "/":
        return _redirect(config.forward.redirect_url)

    headers = request.headers.items()
    query = request.scope["query_string"].decode("latin-1")
    forwarding_service = request.app.state.forwarding_service
    try:
        prepared = forwarding_service.prepare(request.method, path, query, headers)
    except InvalidTargetURL as e:
        return plain_error(str(e), 400)

    if config.proxy.debug:
        write_forward_log(request.method, path, prepared.target_url, dict(headers))

    upstream = request.app.state.upstream_client
    try:
        response = await upstream.forward(prepared, request.stream(), request_logger)
    except ProxyError as e:
        return internal_server_error(e, request_logger)

    request_logger.log_forward(prepared.method, prepared.target_url, response.status_code)
    return response


class ForwardEndpoint:
    """ASGI endpoint for the catch-all route.

    Starlette only keeps ``methods=None`` (any method) for non-function
    endpoints; a function endpoint is limited to GET and HEAD.
    """

    def __init__(self, config: Config, request_logger: RequestLogger) -> None:
        self._config = config
        self._logger = request_logger

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        response = await handle_forward(request, self._config, self._logger)
        await response(scope, receive, send)
