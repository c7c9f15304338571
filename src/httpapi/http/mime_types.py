"""
=============================================================================
MIME TYPE ALIASES
=============================================================================

Controllers and components talk about response formats by short alias
("json", "html") rather than full media types. This module maps aliases
to the Content-Type value written on the response, and route extensions
(/users/1.json) to the media type they stand for.

    response.type("json")
          │
          ▼
    Content-Type: application/json; charset=utf-8

=============================================================================
"""

from typing import Optional


# =============================================================================
# ALIAS DATABASE
# =============================================================================
#
# Alias → media type. Text-based types get a charset parameter when written
# as Content-Type (see resolve_type).
#
# =============================================================================

MIME_ALIASES = {
    "json": "application/json",
    "jsonp": "application/javascript",
    "javascript": "application/javascript",
    "js": "application/javascript",
    "html": "text/html",
    "text": "text/plain",
    "txt": "text/plain",
    "xml": "application/xml",
    "csv": "text/csv",
}

# Types that carry a charset parameter
TEXT_TYPES = {
    "application/json",
    "application/javascript",
    "application/xml",
    "text/html",
    "text/plain",
    "text/csv",
}

DEFAULT_CHARSET = "utf-8"


def get_mime_type(alias: str) -> Optional[str]:
    """
    Look up the bare media type for an alias or extension.

    Args:
        alias: Short name ("json") or extension with/without dot (".json")

    Returns:
        Media type (e.g., "application/json") or None if unknown
    """
    return MIME_ALIASES.get(alias.lower().lstrip("."))


def resolve_type(alias_or_type: str) -> str:
    """
    Resolve an alias or explicit media type to a Content-Type header value.

    Full media types (containing "/") pass through untouched, so callers
    can always hand in either form:

        resolve_type("json")               → "application/json; charset=utf-8"
        resolve_type("image/png")          → "image/png"
        resolve_type("text/html; charset=latin-1") → unchanged

    Unknown aliases fall back to application/octet-stream.
    """
    if "/" in alias_or_type:
        return alias_or_type

    mime_type = get_mime_type(alias_or_type) or "application/octet-stream"
    if mime_type in TEXT_TYPES:
        return f"{mime_type}; charset={DEFAULT_CHARSET}"
    return mime_type
