"""
=============================================================================
HTTP PRIMITIVES
=============================================================================

Request, response, routing and status-code building blocks that the
controller host and the API layer are written against.

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request, parse_accept
from .response import HTTPResponse, format_http_date
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus, reason_phrase
from .mime_types import get_mime_type, resolve_type

__all__ = [
    # Requests
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
    "parse_accept",

    # Responses
    "HTTPResponse",
    "format_http_date",

    # Routing
    "Router",
    "Route",
    "RouteMatch",

    # Status codes
    "HTTPStatus",
    "reason_phrase",

    # MIME types
    "get_mime_type",
    "resolve_type",
]
