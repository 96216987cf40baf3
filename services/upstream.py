"""HTTP forwarding to the upstream target with streaming in both directions."""

import logging
from collections.abc import AsyncIterator

import httpx
from fastapi.responses import StreamingResponse

from core.exceptions import RelayError, RequestBuildError, UpstreamConnectionError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import PreparedRequest

logger = logging.getLogger(__name__)

# Set by httpx from the URL and body; everything else comes from the allow-list.
FRAMING_HEADERS = frozenset({"host", "content-length", "transfer-encoding"})

DEFAULT_CHUNK_SIZE = 64 * 1024


class UpstreamClient:
    """Forward prepared requests and relay the upstream response."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        header_builder: HeaderBuilder,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._client = client
        self._headers = header_builder
        self._chunk_size = chunk_size

    async def forward(
        self,
        prepared: PreparedRequest,
        body: AsyncIterator[bytes] | None,
        request_logger: RequestLogger,
    ) -> StreamingResponse:
        """Send the request upstream and return a streaming relay response.

        Raises:
            RequestBuildError: the outbound request could not be built
            UpstreamConnectionError: the upstream could not be reached
            RelayError: the first chunk of the upstream body could not be read
        """
        request = self._build_request(prepared, body)
        try:
            response = await self._client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as e:
            raise UpstreamConnectionError(str(e) or type(e).__name__, prepared.target_url) from e

        chunks = self._raw_chunks(response)
        try:
            # Read ahead so an early failure can still become a clean 500.
            first = await anext(chunks, b"")
        except httpx.HTTPError as e:
            await response.aclose()
            raise RelayError(str(e) or type(e).__name__, prepared.target_url) from e
        except Exception:
            await response.aclose()
            raise

        relay = StreamingResponse(
            self._relay(response, first, chunks, prepared.target_url, request_logger),
            status_code=response.status_code,
        )
        relay.raw_headers = self._headers.build_relay_headers(response.headers.raw)
        return relay

    def _build_request(
        self,
        prepared: PreparedRequest,
        body: AsyncIterator[bytes] | None,
    ) -> httpx.Request:
        """Build the outbound request with only framing and allow-listed headers."""
        try:
            request = self._client.build_request(
                prepared.method,
                prepared.target_url,
                content=body if prepared.has_body else None,
            )
        except (httpx.InvalidURL, ValueError, TypeError) as e:
            raise RequestBuildError(str(e) or type(e).__name__) from e

        framing = [
            (name, value)
            for name, value in request.headers.multi_items()
            if name in FRAMING_HEADERS
        ]
        try:
            # Inbound values arrive latin-1 decoded; send the same bytes back out.
            request.headers = httpx.Headers(framing + prepared.headers, encoding="latin-1")
        except (UnicodeEncodeError, TypeError) as e:
            raise RequestBuildError(str(e)) from e
        return request

    def _raw_chunks(self, response: httpx.Response) -> AsyncIterator[bytes]:
        """Raw upstream body in chunks of at most ``chunk_size`` bytes."""
        if response.is_stream_consumed:
            # Some transports hand back a response whose body is already read.
            return _split(response.content, self._chunk_size)
        return response.aiter_raw(self._chunk_size)

    async def _relay(
        self,
        response: httpx.Response,
        first: bytes,
        chunks: AsyncIterator[bytes],
        target_url: str,
        request_logger: RequestLogger,
    ) -> AsyncIterator[bytes]:
        """Yield the upstream body; closes the upstream response on every exit."""
        try:
            if first:
                yield first
            async for chunk in chunks:
                yield chunk
        except httpx.HTTPError as e:
            logger.error("Relay from %s failed: %s", target_url, e)
            request_logger.log_error("relay", 500, str(e))
            # Status is already sent; the runtime aborts the connection.
            raise RelayError(str(e) or type(e).__name__, target_url) from e
        finally:
            await response.aclose()


async def _split(content: bytes, chunk_size: int) -> AsyncIterator[bytes]:
    for start in range(0, len(content), chunk_size):
        yield content[start:start + chunk_size]
