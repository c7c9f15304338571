"""
=============================================================================
API LAYER CONFIGURATION
=============================================================================

Centralized configuration for the API layer and its dispatcher.

=============================================================================
WHERE EACH SETTING IS READ
=============================================================================

    ┌──────────────────────────┬──────────────────────────────────────────┐
    │ Setting                  │ Read by                                  │
    ├──────────────────────────┼──────────────────────────────────────────┤
    │ debug                    │ ResponseShaper (JsonFormat helper),      │
    │                          │ ApiExceptionRenderer (exception details) │
    │ show_pagination_links    │ ApiComponent default for the view var    │
    │ allow_jsonp              │ ApiComponent initial JSONP toggle        │
    │ jsonp_callback_param     │ ApiView                                  │
    │ error_controller_name    │ ResponseShaper.has_error                 │
    │ base_url, extensions     │ Router (absolute URLs, .json routes)     │
    │ log_level, log_format    │ Dispatcher.setup_logging, access log     │
    └──────────────────────────┴──────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


@dataclass
class ApiConfig:
    """
    Configuration for the API layer.

    Development:
        ApiConfig(debug=True, log_level="DEBUG")

    Production:
        ApiConfig(base_url="https://api.example.com", log_format="json")
    """

    # ─────────────────────────────────────────────────────────────────────
    # RESPONSE SHAPING
    # ─────────────────────────────────────────────────────────────────────

    debug: bool = False
    """
    Global debug flag.
    Adds the JsonFormat helper (pretty-printed JSON) to API responses and
    includes exception class names in API error bodies.
    """

    show_pagination_links: bool = True
    """
    Default for the showPaginationLinks view variable.
    Component settings override it per controller.
    """

    allow_jsonp: bool = False
    """Initial value of the per-request JSONP toggle."""

    jsonp_callback_param: str = "callback"
    """Query parameter carrying the JSONP callback name."""

    error_controller_name: str = "ErrorController"
    """
    Class name of the controller that renders errors.
    A controller whose class has exactly this name gets the error layout.
    """

    # ─────────────────────────────────────────────────────────────────────
    # ROUTING
    # ─────────────────────────────────────────────────────────────────────

    base_url: Optional[str] = None
    """
    Base for absolute URLs ("https://api.example.com").
    None = derive from the request's scheme and Host header.
    """

    extensions: Tuple[str, ...] = field(default_factory=lambda: ("json",))
    """Route extensions split off request paths (/users/1.json)."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'json' or 'text'."""

    @classmethod
    def from_env(cls) -> "ApiConfig":
        """
        Create configuration from environment variables.

        API_DEBUG                  Debug flag (default: false)
        API_SHOW_PAGINATION_LINKS  Pagination links default (default: true)
        API_BASE_URL               Absolute URL base (default: from request)
        API_LOG_LEVEL              Logging level (default: INFO)
        API_LOG_FORMAT             text | json (default: text)
        """
        return cls(
            debug=_env_flag("API_DEBUG", False),
            show_pagination_links=_env_flag("API_SHOW_PAGINATION_LINKS", True),
            base_url=os.getenv("API_BASE_URL") or None,
            log_level=os.getenv("API_LOG_LEVEL", "INFO"),
            log_format=os.getenv("API_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """Fail fast on invalid values."""
        if self.log_format not in ("text", "json"):
            raise ValueError(f"Invalid log_format: {self.log_format}. Must be 'text' or 'json'.")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level}")

        if not self.error_controller_name:
            raise ValueError("error_controller_name must not be empty")

        if not self.jsonp_callback_param:
            raise ValueError("jsonp_callback_param must not be empty")

        if self.base_url and "://" not in self.base_url:
            raise ValueError(f"base_url must be absolute: {self.base_url}")
