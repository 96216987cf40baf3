from core.headers import CORS_HEADERS, HeaderBuilder, canonical_name


class TestBuildForwardHeaders:
    """Allow-list filtering of inbound headers."""

    def test_only_allowed_headers_kept(self):
        result = HeaderBuilder().build_forward_headers(
            [("Authorization", "Bearer x"), ("Cookie", "s=1"), ("X-Custom", "v")]
        )
        assert result == [("Authorization", "Bearer x")]

    def test_case_insensitive_match_forwards_canonical_name(self):
        result = HeaderBuilder().build_forward_headers(
            [("AUTHORIZATION", "a"), ("content-type", "text/plain"), ("uSeR-aGeNt", "ua")]
        )
        assert result == [
            ("Authorization", "a"),
            ("Content-Type", "text/plain"),
            ("User-Agent", "ua"),
        ]

    def test_multi_valued_header_preserved_in_order(self):
        result = HeaderBuilder().build_forward_headers(
            [("accept", "text/html"), ("host", "proxy"), ("accept", "application/json")]
        )
        assert result == [("Accept", "text/html"), ("Accept", "application/json")]

    def test_host_and_hop_headers_dropped(self):
        result = HeaderBuilder().build_forward_headers(
            [("host", "proxy.local"), ("connection", "keep-alive"), ("accept-encoding", "gzip")]
        )
        assert result == []

    def test_non_ascii_names_dropped(self):
        result = HeaderBuilder().build_forward_headers([("Accépt", "x"), ("Accept", "y")])
        assert result == [("Accept", "y")]


class TestBuildRelayHeaders:
    """Upstream headers copied back to the caller."""

    def test_cors_first_then_every_upstream_header(self):
        raw = [(b"X-Test", b"OK Value"), (b"Set-Cookie", b"a=1"), (b"Set-Cookie", b"b=2")]

        result = HeaderBuilder().build_relay_headers(raw)

        cors = [(k.lower().encode(), v.encode()) for k, v in CORS_HEADERS]
        assert result == cors + [
            (b"x-test", b"OK Value"),
            (b"set-cookie", b"a=1"),
            (b"set-cookie", b"b=2"),
        ]

    def test_transfer_encoding_left_to_runtime(self):
        raw = [(b"Transfer-Encoding", b"chunked"), (b"Content-Type", b"text/plain")]

        result = HeaderBuilder().build_relay_headers(raw)

        assert (b"transfer-encoding", b"chunked") not in result
        assert (b"content-type", b"text/plain") in result

    def test_cors_headers_values(self):
        headers = dict(HeaderBuilder().cors_headers())
        assert headers == {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "POST, GET, OPTIONS, PUT, DELETE",
            "Access-Control-Allow-Headers": "Content-Type, Authorization",
        }


def test_canonical_name():
    assert canonical_name("content-type") == "Content-Type"
    assert canonical_name("AUTHORIZATION") == "Authorization"
    assert canonical_name("x-request-id") == "X-Request-Id"
