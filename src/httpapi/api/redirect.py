"""
=============================================================================
REDIRECT INTERCEPTOR
=============================================================================

Browser redirects make no sense to an API client: a 302 with an empty body
either gets followed blindly or dropped. For API requests the interceptor
turns a redirect into a JSON answer instead.

=============================================================================
STATUS HANDLING
=============================================================================

    status given ──► normalized (missing / 0 / "" → 302)
                          │
          ┌───────────────┼───────────────────────┐
          ▼               ▼                       ▼
        404            301 / 302               anything else
          │               │                       │
    status 404      status + Location        nothing set here
    send, STOP            │                       │
    (no body)             └───────────┬───────────┘
                                      ▼
                      body {"success": true, "url": <absolute>,
                            "status": <normalized>}
                      render, send, STOP

404 is terminal: "not found" is not somewhere to navigate to, so it gets
no body and no Location. Only 301 and 302 get a Location header, but every
non-404 status gets the JSON body. This asymmetry is kept as-is until the
product owner confirms otherwise; see DESIGN.md.

=============================================================================
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import logging

from ..http.status_codes import HTTPStatus
from .classifier import ClassificationResult


logger = logging.getLogger(__name__)


UrlResolver = Callable[[Any], str]

LOCATION_STATUSES = (HTTPStatus.MOVED_PERMANENTLY, HTTPStatus.FOUND)


@dataclass(frozen=True)
class RedirectDecision:
    """
    How to answer one intercepted redirect.

    terminal: send the bare status and stop, no body (404).
    location: Location header value, only for 301/302.
    body:     JSON redirect body, None when terminal.
    allow_exit: the caller's exit flag. API redirects stop regardless;
                a False value is only logged.
    """

    status: int
    url: str
    terminal: bool
    location: Optional[str] = None
    body: Optional[Dict[str, Any]] = None
    allow_exit: bool = True

    @property
    def sets_status(self) -> bool:
        """Whether the response status is rewritten (404, 301, 302)."""
        return self.terminal or self.location is not None


def normalize_status(status: Any) -> int:
    """
    Missing or empty status means 302; numeric strings are accepted.

    Raises:
        ValueError: For non-numeric values such as "abc" or "3.5".
    """
    if not status:
        return int(HTTPStatus.FOUND)
    try:
        return int(status)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid redirect status: {status!r}") from None


class RedirectInterceptor:
    """
    Decides what an API client gets instead of a browser redirect.

    Args:
        resolve_url: Turns a redirect target into an absolute URL
                     (normally Router.url(target, full=True)). Malformed
                     targets are the resolver's business.
    """

    def __init__(self, resolve_url: UrlResolver):
        self.resolve_url = resolve_url

    def intercept(
        self,
        classification: ClassificationResult,
        url: Any,
        status: Any = None,
        allow_exit: bool = True,
    ) -> Optional[RedirectDecision]:
        """
        Returns:
            None for non-API requests (the host redirects normally),
            otherwise the RedirectDecision to apply.
        """
        if not classification.is_api:
            return None

        code = normalize_status(status)
        absolute_url = self.resolve_url(url)

        if code == HTTPStatus.NOT_FOUND:
            logger.debug(f"API redirect to {absolute_url} with 404: bare status")
            return RedirectDecision(
                status=code,
                url=absolute_url,
                terminal=True,
                allow_exit=allow_exit,
            )

        logger.debug(f"API redirect to {absolute_url} ({code}): JSON body")
        return RedirectDecision(
            status=code,
            url=absolute_url,
            terminal=False,
            location=absolute_url if code in LOCATION_STATUSES else None,
            body={"success": True, "url": absolute_url, "status": code},
            allow_exit=allow_exit,
        )
