"""
Unit tests for HTTP primitives.

Tests target building, URL decomposition and the Request/Response
records.
"""

import dataclasses

import pytest

from http_transfer.exceptions import URLError
from http_transfer.http_primitives import (
    ParsedURL,
    Request,
    Response,
    build_target,
    parse_url,
)
from http_transfer.streams import RequestBodySource


class TestParseURL:
    """Test parse_url decomposition."""

    def test_full_url(self) -> None:
        url = parse_url("http://wikipedia.com/elo321/123elo?build_id=johnny&name=john")
        assert url.host == "wikipedia.com"
        assert url.port == 80
        assert url.path == "/elo321/123elo"
        assert url.query == "build_id=johnny&name=john"

    def test_bare_host(self) -> None:
        url = parse_url("wikipedia.com")
        assert url.host == "wikipedia.com"
        assert url.port == 80
        assert url.path == "/"
        assert url.query == ""
        assert url.scheme == "http"

    def test_explicit_port(self) -> None:
        url = parse_url("localhost:5000/home")
        assert url.host == "localhost"
        assert url.port == 5000
        assert url.path == "/home"

    def test_https_without_port_still_defaults_to_80(self) -> None:
        url = parse_url("https://example.com/api")
        assert url.scheme == "https"
        assert url.port == 80
        assert url.is_tls

    def test_fragment_is_dropped(self) -> None:
        url = parse_url("http://example.com/a?x=1#frag")
        assert url.path == "/a"
        assert url.query == "x=1"

    def test_url_inside_query_without_scheme(self) -> None:
        url = parse_url("wikipedia.com/r?to=http://x.org")
        assert url.scheme == "http"
        assert url.host == "wikipedia.com"
        assert url.path == "/r"
        assert url.query == "to=http://x.org"

    def test_url_inside_query_with_port(self) -> None:
        url = parse_url("localhost:5000/redirect?next=http://example.com")
        assert (url.host, url.port, url.path) == ("localhost", 5000, "/redirect")
        assert url.query == "next=http://example.com"

    def test_scheme_relative(self) -> None:
        url = parse_url("//example.com/x")
        assert url.scheme == "http"
        assert url.host == "example.com"

    def test_ipv6_host(self) -> None:
        url = parse_url("http://[::1]:8080/")
        assert url.host == "::1"
        assert url.port == 8080

    def test_target_property(self) -> None:
        assert parse_url("example.com/a?b=c").target == "/a?b=c"
        assert parse_url("example.com/a").target == "/a"

    def test_results_are_independent_strings(self) -> None:
        url = parse_url("example.com/a?b=c")
        assert isinstance(url, ParsedURL)
        assert all(isinstance(part, str) for part in (url.host, url.path, url.query))

    @pytest.mark.parametrize(
        "bad_url",
        [
            "http://example.com:abc/",
            "http://example.com:99999/",
            "http://example.com:-1/",
        ],
    )
    def test_malformed_port_fails(self, bad_url) -> None:
        with pytest.raises(URLError, match="Malformed port"):
            parse_url(bad_url)

    def test_missing_host_fails(self) -> None:
        with pytest.raises(URLError, match="No hostname"):
            parse_url("http:///path")

    def test_empty_url_fails(self) -> None:
        with pytest.raises(URLError, match="Empty URL"):
            parse_url("   ")

    def test_unsupported_scheme_fails(self) -> None:
        with pytest.raises(URLError) as exc_info:
            parse_url("ftp://example.com/file")
        assert exc_info.value.unsupported_scheme

    def test_non_string_fails(self) -> None:
        with pytest.raises(URLError):
            parse_url(b"http://example.com")


class TestBuildTarget:
    """Test build_target joining."""

    def test_leading_slash_is_stripped(self) -> None:
        assert build_target("localhost", 5000, "/home") == build_target("localhost", 5000, "home")
        assert build_target("localhost", 5000, "/home") == "localhost:5000/home"

    def test_all_leading_slashes_are_stripped(self) -> None:
        assert build_target("localhost", 5000, "///home") == "localhost:5000/home"

    def test_empty_path(self) -> None:
        assert build_target("localhost", 80, "") == "localhost:80/"

    def test_query_is_kept(self) -> None:
        assert build_target("h", 1, "/a?b=c") == "h:1/a?b=c"

    def test_scheme_in_host(self) -> None:
        assert build_target("https://example.com", 8443, "/x") == "https://example.com:8443/x"

    def test_ipv6_host_is_bracketed(self) -> None:
        assert build_target("::1", 8080, "/") == "[::1]:8080/"

    def test_round_trips_through_parse_url(self) -> None:
        url = parse_url(build_target("localhost", 5000, "/home?x=1"))
        assert (url.host, url.port, url.path, url.query) == ("localhost", 5000, "/home", "x=1")

    @pytest.mark.parametrize("port", [0, -1, 65536, "abc", None, True, 80.9])
    def test_invalid_port(self, port) -> None:
        with pytest.raises(URLError):
            build_target("localhost", port, "/")

    def test_non_ascii_host(self) -> None:
        assert build_target("bücher.de", 80, "/") == "bücher.de:80/"

    def test_host_without_idna_form(self) -> None:
        with pytest.raises(URLError, match="Invalid host"):
            build_target("ü" * 70 + ".de", 80, "/")
        with pytest.raises(URLError, match="Invalid host"):
            build_target("https://" + "ü" * 70 + ".de", 443, "/")

    @pytest.mark.parametrize("host", ["", "   ", None])
    def test_invalid_host(self, host) -> None:
        with pytest.raises(URLError, match="Invalid host"):
            build_target(host, 80, "/")


class TestRequest:
    """Test Request class functionality."""

    def test_create_with_strings(self) -> None:
        request = Request.create("GET", "http://example.com/api?q=1")
        assert request.method == b"GET"
        assert request.url.host == "example.com"
        assert request.target == b"/api?q=1"
        assert request.body is None

    def test_host_header_added(self) -> None:
        request = Request.create("GET", "localhost:5000/")
        assert request.headers[0] == (b"Host", b"localhost:5000")

    def test_host_header_omits_default_port(self) -> None:
        request = Request.create("GET", "example.com/")
        assert request.headers[0] == (b"Host", b"example.com")

    def test_existing_host_header_kept(self) -> None:
        request = Request.create("GET", "example.com/", headers=[("host", "other")])
        assert request.headers == [(b"host", b"other")]

    def test_host_header_idna_encoded(self) -> None:
        request = Request.create("GET", "http://bücher.de/")
        assert request.headers[0] == (b"Host", b"xn--bcher-kva.de")

    def test_host_without_idna_form_fails(self) -> None:
        url = ParsedURL(host="ü" * 70 + ".de", port=80, path="/", query="")
        with pytest.raises(URLError, match="Invalid host"):
            Request.create("GET", url)

    def test_headers_converted_to_bytes(self) -> None:
        request = Request.create("POST", "example.com/", headers=[("Accept", "application/json")])
        assert (b"Accept", b"application/json") in request.headers

    def test_body_source(self) -> None:
        source = RequestBodySource(b"data")
        request = Request.create("POST", "example.com/", body=source)
        assert request.body is source

    def test_validation_method_bytes(self) -> None:
        with pytest.raises(ValueError, match="method must be bytes"):
            Request(method="GET", url=parse_url("example.com"))

    def test_validation_url(self) -> None:
        with pytest.raises(ValueError, match="url must be a ParsedURL"):
            Request(method=b"GET", url=("example.com", 80, "/", ""))

    def test_validation_header_bytes(self) -> None:
        with pytest.raises(ValueError, match="header names and values must be bytes"):
            Request(method=b"GET", url=parse_url("example.com"), headers=[("a", b"b")])

    def test_validation_body(self) -> None:
        with pytest.raises(ValueError, match="body must be a ByteSource"):
            Request(method=b"POST", url=parse_url("example.com"), body=b"raw")

    def test_immutability(self) -> None:
        request = Request.create("GET", "example.com")
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.method = b"POST"


class TestResponse:
    """Test Response record."""

    def test_success_range(self) -> None:
        assert Response(status_code=200).is_success
        assert Response(status_code=204).is_success
        assert not Response(status_code=404).is_success
        assert not Response(status_code=500).is_success

    def test_validation_status_code(self) -> None:
        with pytest.raises(ValueError, match="status_code must be int"):
            Response(status_code="200")
