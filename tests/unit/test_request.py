"""
Unit tests for HTTP request parsing, content negotiation and detectors.
"""

import pytest

from httpapi.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    parse_accept,
    parse_request,
)

from conftest import make_request


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_json_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(sample_json_request, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/users/7.json"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)
        assert request.host == "localhost:8080"
        assert request.user_agent == "pytest"

    def test_parse_query_params(self):
        """Test query parameter parsing."""
        request = parse_request(b"GET /users?page=2&callback=cb HTTP/1.1\r\nHost: x\r\n\r\n")

        assert request.get_query("page") == "2"
        assert request.get_query("callback") == "cb"
        assert request.get_query("missing", "default") == "default"

    def test_parse_post_with_body(self):
        """Test parsing a POST with a JSON body."""
        body = b'{"name": "Ada"}'
        data = (
            b"POST /users.json HTTP/1.1\r\n"
            b"Content-Type: application/json; charset=utf-8\r\n"
            + f"Content-Length: {len(body)}\r\n".encode()
            + b"\r\n"
            + body
        )
        request = parse_request(data)

        assert request.content_type == "application/json"
        assert request.json == {"name": "Ada"}

    def test_invalid_json_body(self):
        """Test that a broken JSON body raises HTTPParseError."""
        request = HTTPRequest(method="POST", path="/", body=b"{nope")
        with pytest.raises(HTTPParseError):
            request.json

    def test_parse_invalid_method(self):
        """Test that unknown methods are rejected with 405."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"BREW /pot HTTP/1.1\r\n\r\n")
        assert exc_info.value.status_code == 405

    def test_parse_invalid_request_line(self):
        """Test a malformed request line."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GET\r\n\r\n")
        assert exc_info.value.status_code == 400

    def test_parse_missing_terminator(self):
        """Test a request without the blank line."""
        with pytest.raises(HTTPParseError):
            parse_request(b"GET / HTTP/1.1\r\nHost: x\r\n")

    def test_parse_unsupported_version(self):
        """Test HTTP/2.0 on the wire."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GET / HTTP/2.0\r\n\r\n")
        assert exc_info.value.status_code == 505

    def test_parse_path_traversal_blocked(self):
        """Test that .. in the path is rejected."""
        with pytest.raises(HTTPParseError):
            parse_request(b"GET /../etc/passwd HTTP/1.1\r\n\r\n")

    def test_parse_request_too_large(self):
        """Test the size limit."""
        with pytest.raises(HTTPParseError) as exc_info:
            RequestParser(max_request_size=10).parse(b"GET / HTTP/1.1\r\n\r\n")
        assert exc_info.value.status_code == 413

    def test_incomplete_body(self):
        """Test a body shorter than Content-Length."""
        with pytest.raises(HTTPParseError):
            parse_request(b"POST / HTTP/1.1\r\nContent-Length: 10\r\n\r\nabc")

    def test_repeated_headers_joined(self):
        """Test that repeated headers are comma-joined."""
        request = parse_request(
            b"GET / HTTP/1.1\r\nAccept: text/html\r\nAccept: application/json\r\n\r\n"
        )
        assert request.headers["accept"] == "text/html, application/json"
        assert request.accepts("application/json") is True


class TestAccept:
    """Tests for Accept header negotiation."""

    def test_parse_accept_order(self):
        """Test ordering by q-value."""
        assert parse_accept("text/html;q=0.5, application/json, */*;q=0.1") == [
            "application/json",
            "text/html",
            "*/*",
        ]

    def test_equal_quality_keeps_order(self):
        """Test that ties keep header order."""
        assert parse_accept("text/html, application/xml") == ["text/html", "application/xml"]

    def test_invalid_quality(self):
        """Test that an unparseable q-value ranks last."""
        assert parse_accept("text/plain;q=abc, text/html") == ["text/html", "text/plain"]

    def test_empty_header(self):
        """Test a missing Accept header."""
        assert make_request().accepts() == []

    def test_accepts_exact_match(self):
        """Test that only listed types are accepted."""
        request = make_request(accept="Application/JSON")

        assert request.accepts("application/json") is True
        assert request.accepts("text/html") is False

    def test_wildcard_not_expanded(self):
        """Test that */* does not accept application/json."""
        assert make_request(accept="*/*").accepts("application/json") is False


class TestDetectors:
    """Tests for the request detector surface."""

    def test_custom_detector(self):
        """Test adding and evaluating a detector."""
        request = make_request(ext="json")
        request.add_detector("json", lambda r: r.extension == "json")

        assert request.has_detector("JSON")
        assert request.is_("json") is True

    def test_builtin_method_detectors(self):
        """Test the method detectors."""
        request = make_request(method="POST")

        assert request.is_("post") is True
        assert request.is_("get") is False

    def test_builtin_ajax_and_ssl(self):
        """Test the ajax and ssl detectors."""
        request = make_request()
        request.headers["x-requested-with"] = "XMLHttpRequest"
        request.scheme = "https"

        assert request.is_("ajax") is True
        assert request.is_("ssl") is True

    def test_unknown_detector(self):
        """Test that unknown names are False."""
        assert make_request().is_("xml") is False

    def test_extension(self):
        """Test the extension property."""
        assert make_request(ext="json").extension == "json"
        assert make_request().extension is None
