"""
=============================================================================
HTTP REQUEST
=============================================================================

The request object the API layer classifies, plus a parser that builds it
from raw HTTP/1.x bytes.

=============================================================================
WHAT THE API LAYER READS FROM A REQUEST
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                  CLASSIFICATION INPUTS                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /users/42.json HTTP/1.1                                        │
    │                 ──┬─                                                 │
    │                   └── route extension  → request.extension == "json" │
    │                       (split off by the Router)                      │
    │                                                                      │
    │   Accept: application/json, text/html;q=0.8                         │
    │           ────────────────────────────────────                       │
    │                   └── negotiated types → request.accepts()           │
    │                       ["application/json", "text/html"]              │
    │                                                                      │
    │   request.is_("api")                                                 │
    │           └── detector surface: named predicates installed by the    │
    │               RequestClassifier at bind time                         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PER-REQUEST CONTEXT
=============================================================================

`request.context` is a plain dict scoped to one request. Anything that
would otherwise be a process-wide setting for "this request only" lives
here; the API component stores the exception renderer it wants the
dispatcher to use, and the logging middleware reads the "api" flag.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Callable, List
from urllib.parse import parse_qs, urlparse, unquote
import re
import json


class HTTPParseError(Exception):
    """
    Raised when raw request bytes cannot be parsed.

    Carries the HTTP status code that should be sent back:
    400 for malformed input, 405 for unknown methods, 413 for oversized
    requests, 505 for unsupported versions.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


Detector = Callable[["HTTPRequest"], bool]


VALID_METHODS = {
    "GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS", "TRACE", "CONNECT",
}


def parse_accept(header: str) -> List[str]:
    """
    Parse an Accept header into media types ordered by preference.

    =====================================================================
    ACCEPT HEADER FORMAT (RFC 7231 §5.3.2)
    =====================================================================

        Accept: text/html, application/json;q=0.9, */*;q=0.1
                ─────────  ────────────────┬─────  ─────┬────
                 q=1.0                   q=0.9        q=0.1

    Types are sorted by q-value (highest first). Equal q-values keep
    their header order. Parameters other than q are dropped.

    =====================================================================

    Args:
        header: Raw Accept header value (may be empty)

    Returns:
        Lowercase media types, most preferred first
    """
    ranked = []
    for position, part in enumerate(header.split(",")):
        pieces = [p.strip() for p in part.split(";")]
        media_type = pieces[0].lower()
        if not media_type:
            continue

        quality = 1.0
        for param in pieces[1:]:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        ranked.append((-quality, position, media_type))

    ranked.sort()
    return [media_type for _, _, media_type in ranked]


@dataclass
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    Headers are stored with lowercase names (HTTP header names are
    case-insensitive per RFC 7230), so lookups never need .lower().

    Fields:
        method:         GET, POST, ...
        path:           Request path without query string
        headers:        Lowercase header name → value
        query_params:   Query param → list of values
        params:         Router-injected values: path params plus "ext"
        context:        Per-request settings (see module docstring)
        scheme:         "http" or "https", used for absolute URLs
    """

    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""

    params: Dict[str, str] = field(default_factory=dict)
    context: Dict[str, Any] = field(default_factory=dict)

    scheme: str = "http"
    client_address: tuple[str, int] = ("", 0)

    _detectors: Dict[str, Detector] = field(default_factory=dict, repr=False)
    _accept: Optional[List[str]] = field(default=None, repr=False)
    _body_json: Optional[Any] = field(default=None, repr=False)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def extension(self) -> Optional[str]:
        """Route extension split off by the router ("json" for /users.json)."""
        return self.params.get("ext")

    @property
    def host(self) -> str:
        return self.headers.get("host", "")

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def content_type(self) -> Optional[str]:
        """Content-Type without parameters ("application/json")."""
        ct = self.headers.get("content-type", "").split(";")[0].strip().lower()
        return ct or None

    @property
    def is_ajax(self) -> bool:
        """True for XMLHttpRequest-style requests (X-Requested-With)."""
        return self.headers.get("x-requested-with", "").lower() == "xmlhttprequest"

    @property
    def json(self) -> Any:
        """
        Parse the request body as JSON (cached after first access).

        Raises:
            HTTPParseError: If body is not valid JSON.
        """
        if self._body_json is None and self.body:
            try:
                self._body_json = json.loads(self.body.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise HTTPParseError(f"Invalid JSON body: {e}")
        return self._body_json

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First value of a query parameter, or default."""
        values = self.query_params.get(name, [])
        return values[0] if values else default

    # =========================================================================
    # CONTENT NEGOTIATION
    # =========================================================================

    def accepts(self, media_type: Optional[str] = None):
        """
        Inspect the negotiated content types from the Accept header.

        With no argument, returns the parsed list (most preferred first).
        With a media type, returns whether that exact type was listed.
        Wildcards are not expanded: "*/*" does not make a request accept
        application/json, otherwise every browser would look like an API
        client.

        Example:
            # Accept: application/json, text/html;q=0.9
            request.accepts()                     # ["application/json", "text/html"]
            request.accepts("application/json")   # True
            request.accepts("application/xml")    # False
        """
        if self._accept is None:
            self._accept = parse_accept(self.headers.get("accept", ""))
        if media_type is None:
            return list(self._accept)
        return media_type.lower() in self._accept

    # =========================================================================
    # DETECTORS
    # =========================================================================
    #
    # A detector is a named boolean predicate over the request:
    #
    #     request.add_detector("json", lambda r: r.extension == "json")
    #     request.is_("json")   # → True / False
    #
    # Built-in names: every HTTP method ("get", "post", ...), "ajax", "ssl".
    # Detectors added at runtime take precedence over built-ins.
    #
    # =========================================================================

    def add_detector(self, name: str, callback: Detector) -> None:
        """Register (or replace) a named detector on this request."""
        self._detectors[name.lower()] = callback

    def has_detector(self, name: str) -> bool:
        return name.lower() in self._detectors

    def is_(self, name: str) -> bool:
        """
        Evaluate a named detector.

        Unknown names evaluate False rather than raising, since host code
        may ask about a format before anything registered it.
        """
        key = name.lower()
        detector = self._detectors.get(key)
        if detector is not None:
            return bool(detector(self))

        if key.upper() in VALID_METHODS:
            return self.method.upper() == key.upper()
        if key == "ajax":
            return self.is_ajax
        if key == "ssl":
            return self.scheme == "https"
        return False


class RequestParser:
    """
    Parses raw HTTP/1.x request bytes into HTTPRequest objects.

        Raw bytes
            │
            ├── size check ............. 413 if over max_request_size
            ├── split at \\r\\n\\r\\n ...... 400 if no terminator
            ├── request line ........... 400 / 405 / 505
            ├── headers ................ lowercase names, repeats joined
            └── body ................... exactly Content-Length bytes
    """

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 10 * 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0),
        scheme: str = "http",
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data.

        Args:
            data: Raw request bytes.
            client_address: Client's (ip, port) tuple.
            scheme: Scheme the connection was accepted on.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(f"Request too large: {len(data)} bytes", status_code=413)

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("utf-8", errors="replace")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, path, query_params, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", 0))
        except ValueError:
            raise HTTPParseError("Invalid Content-Length header")
        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            query_params=query_params,
            body=body[:content_length],
            scheme=scheme,
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, Dict[str, list[str]], str]:
        """Split "METHOD URI VERSION" and validate each part."""
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line}")

        method, uri, version = match.groups()

        if method not in VALID_METHODS:
            raise HTTPParseError(f"Invalid method: {method}", status_code=405)

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(f"Unsupported HTTP version: {version}", status_code=505)

        parsed = urlparse(uri)
        path = unquote(parsed.path) or "/"
        if ".." in path:
            raise HTTPParseError("Invalid path: contains ..", status_code=400)

        return method, path, parse_qs(parsed.query, keep_blank_values=True), version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """Parse "Name: value" lines; repeated headers are comma-joined."""
        headers: Dict[str, str] = {}
        for line in lines:
            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue  # lenient: skip malformed lines

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value
        return headers


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_size: int = 10 * 1024 * 1024,
) -> HTTPRequest:
    """Parse raw bytes with a one-off RequestParser."""
    return RequestParser(max_request_size=max_size).parse(data, client_address)
