"""
=============================================================================
HTTP RESPONSE
=============================================================================

The mutable response object a controller fills in over the course of one
request. Components mutate it directly: content type, status code,
Location header, and finally `send()`.

=============================================================================
RESPONSE LIFECYCLE
=============================================================================

    Controller created        Components / actions        Dispatcher
    ──────────────────        ────────────────────        ──────────
    HTTPResponse()     ─────► .type("json")        ─────► to_bytes()
      status=200              .status_code(302)
      headers={}              .header("Location", url)
      body=b""                .set_body(...)
                              .send()   ← marks the response final

`send()` does not write to a socket; it marks the response as complete so
the dispatcher knows nothing after it may touch the response.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Union
import json
import logging

from .mime_types import resolve_type
from .status_codes import HTTPStatus, reason_phrase


logger = logging.getLogger(__name__)


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response under construction.

    Setters return self for chaining, like the builder methods:

        response.status_code(301).header("Location", "http://x/y").send()
    """

    status: int = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"
    sent: bool = False

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 302 Found"."""
        return f"{self.version} {int(self.status)} {reason_phrase(self.status)}"

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")

    def status_code(self, code: Optional[int] = None) -> int:
        """
        Get or set the status code.

        Mirrors the host-framework style accessor: called with no argument
        it reads, with an argument it writes and returns the new value.
        """
        if code is not None:
            self.status = int(code)
        return int(self.status)

    def header(self, name: str, value: str) -> "HTTPResponse":
        """Set a response header (names are kept as given)."""
        self.headers[name] = value
        return self

    def type(self, alias: str) -> "HTTPResponse":
        """
        Set Content-Type from an alias ("json", "html") or a full media type.
        """
        self.headers["Content-Type"] = resolve_type(alias)
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the body; strings are UTF-8 encoded."""
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def json_body(self, data, pretty: bool = False) -> "HTTPResponse":
        """Serialize data as the body and set a JSON Content-Type."""
        indent = 2 if pretty else None
        self.body = json.dumps(data, indent=indent, ensure_ascii=False).encode("utf-8")
        return self.type("json")

    def send(self) -> "HTTPResponse":
        """
        Mark the response as final.

        Calling send() twice is harmless; the first call wins and later
        calls only log.
        """
        if self.sent:
            logger.debug(f"Response already sent ({self.status_line})")
            return self
        self.sent = True
        logger.debug(f"Response sent: {self.status_line}")
        return self

    def to_bytes(self, server_name: str = "PyHTTPApi/1.0") -> bytes:
        """
        Serialize to raw HTTP bytes.

            HTTP/1.1 302 Found\\r\\n
            Location: http://localhost/users\\r\\n
            Content-Type: application/json; charset=utf-8\\r\\n
            Content-Length: 55\\r\\n       ← auto
            Date: ...\\r\\n                ← auto
            Server: PyHTTPApi/1.0\\r\\n    ← auto
            \\r\\n
            {"success": true, ...}
        """
        response_headers = dict(self.headers)
        response_headers.setdefault("Content-Length", str(len(self.body)))
        response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        response_headers.setdefault("Server", server_name)

        lines = [self.status_line]
        lines.extend(f"{name}: {value}" for name, value in response_headers.items())
        lines.append("")

        return "\r\n".join(lines).encode("utf-8") + b"\r\n" + self.body


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Example: Wed, 01 Jan 2026 12:00:00 GMT
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
