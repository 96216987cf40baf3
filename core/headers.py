"""Header policy for forwarded requests and relayed responses."""

from collections.abc import Iterable

ALLOWED_HEADERS = frozenset({"authorization", "content-type", "user-agent", "accept"})

CORS_HEADERS: tuple[tuple[str, str], ...] = (
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Methods", "POST, GET, OPTIONS, PUT, DELETE"),
    ("Access-Control-Allow-Headers", "Content-Type, Authorization"),
)

# Framing is owned by the serving runtime, not copied from upstream.
RELAY_SKIP_HEADERS = frozenset({"transfer-encoding"})


def canonical_name(name: str) -> str:
    """'content-type' -> 'Content-Type'."""
    return "-".join(part.capitalize() for part in name.split("-"))


class HeaderBuilder:
    """Build header lists for the outbound request and the caller response."""

    def cors_headers(self) -> list[tuple[str, str]]:
        return list(CORS_HEADERS)

    def build_forward_headers(self, items: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
        """Keep allow-listed headers, every value, under their canonical name.

        Non-ASCII names never match the ASCII allow-list and are dropped
        without case folding.
        """
        forwarded: list[tuple[str, str]] = []
        for name, value in items:
            if name.isascii() and name.lower() in ALLOWED_HEADERS:
                forwarded.append((canonical_name(name), value))
        return forwarded

    def build_relay_headers(self, raw: Iterable[tuple[bytes, bytes]]) -> list[tuple[bytes, bytes]]:
        """CORS headers followed by every upstream header and value.

        Names are lowercased as ASGI expects; values pass through untouched.
        """
        relayed = [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in CORS_HEADERS]
        for name, value in raw:
            name = name.lower()
            if name.decode("latin-1") in RELAY_SKIP_HEADERS:
                continue
            relayed.append((name, value))
        return relayed
