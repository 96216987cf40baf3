"""Request preparation for forwarding."""

from collections.abc import Iterable

from core.headers import HeaderBuilder
from core.request_types import PreparedRequest
from core.target import derive_target_url, validate_target_url


class ForwardingService:
    """Turn an inbound request description into a PreparedRequest."""

    def __init__(self, header_builder: HeaderBuilder) -> None:
        self._headers = header_builder

    def prepare(
        self,
        method: str,
        path: str,
        query: str,
        headers: Iterable[tuple[str, str]],
    ) -> PreparedRequest:
        """Derive the target URL and filter headers; raises InvalidTargetURL."""
        headers = list(headers)
        target_url = validate_target_url(derive_target_url(path, query))
        return PreparedRequest(
            method=method,
            target_url=target_url,
            headers=self._headers.build_forward_headers(headers),
            has_body=_has_body(headers),
        )


def _has_body(headers: list[tuple[str, str]]) -> bool:
    """Whether the inbound request declared a body."""
    for name, value in headers:
        key = name.lower()
        if key == "transfer-encoding":
            return True
        if key == "content-length":
            return value.strip() not in ("", "0")
    return False
