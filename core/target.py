"""Target URL derivation from the inbound request path."""

import re

from core.exceptions import InvalidTargetURL

# Leading slashes, the scheme token, and any slashes after it.
TARGET_PATTERN = re.compile(r"^/*(https?:)/*")


def derive_target_url(path: str, query: str = "") -> str:
    """Rebuild the target URL embedded in ``path``.

    ``/https://example.com/a`` and ``//https:/example.com/a`` both become
    ``https://example.com/a``. Paths without an http(s) scheme token are
    returned unchanged so validation can report them.
    """
    target_url = TARGET_PATTERN.sub(r"\1//", path, count=1)
    if query:
        target_url += "?" + query
    return target_url


def validate_target_url(target_url: str) -> str:
    """Return ``target_url`` or raise InvalidTargetURL if it is not http(s)."""
    if not target_url.startswith("http"):
        raise InvalidTargetURL(target_url)
    return target_url
