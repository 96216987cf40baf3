"""Custom exception hierarchy for the path proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class InvalidTargetURL(ProxyError):
    """Raised when the URL derived from the request path is not http(s).

    Attributes:
        url: The derived URL that failed validation
    """

    def __init__(self, url: str) -> None:
        super().__init__(f"invalid url: {url}")
        self.url = url


class RequestBuildError(ProxyError):
    """Raised when the outbound request cannot be constructed."""


class UpstreamError(ProxyError):
    """Raised when talking to the upstream target fails.

    Attributes:
        message: Error message
        target_url: URL of the upstream request (optional)
    """

    def __init__(self, message: str, target_url: str | None = None) -> None:
        super().__init__(message)
        self.target_url = target_url


class UpstreamConnectionError(UpstreamError):
    """Raised when the upstream request cannot be sent or answered."""


class RelayError(UpstreamError):
    """Raised when streaming the upstream body back to the caller fails."""
