"""
=============================================================================
HTTP ERRORS AND THE DEFAULT (HTML) EXCEPTION RENDERER
=============================================================================

Controller actions signal failures by raising HTTPError subclasses. The
dispatcher catches them and hands them to an exception renderer:

    action raises NotFoundError("No such user")
          │
          ▼
    Dispatcher looks up request.context["exception_renderer"]
          │
          ├── not set      → ExceptionRenderer      (HTML error page)
          └── set by the   → ApiExceptionRenderer   (JSON error body)
              API component

Both renderers go through an ErrorController, so error pages run the same
before_render hooks as any other page.

=============================================================================
"""

import logging
from typing import Optional, Type, TYPE_CHECKING

from .http.request import HTTPRequest
from .http.response import HTTPResponse
from .http.status_codes import HTTPStatus, reason_phrase

if TYPE_CHECKING:
    from .config import ApiConfig
    from .controller import Controller


logger = logging.getLogger(__name__)


class HTTPError(Exception):
    """Base for errors that map to an HTTP status code."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message or self.default_message())
        if status_code is not None:
            self.status_code = status_code

    @classmethod
    def default_message(cls) -> str:
        return reason_phrase(cls.status_code)


class BadRequestError(HTTPError):
    status_code = HTTPStatus.BAD_REQUEST


class ForbiddenError(HTTPError):
    status_code = HTTPStatus.FORBIDDEN


class NotFoundError(HTTPError):
    status_code = HTTPStatus.NOT_FOUND


class MethodNotAllowedError(HTTPError):
    status_code = HTTPStatus.METHOD_NOT_ALLOWED

    def __init__(self, allowed: list[str], message: str = ""):
        super().__init__(message)
        self.allowed = allowed


class MissingLayoutError(HTTPError):
    """A view asked for a layout that does not exist (e.g. "json/default")."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


def status_for(error: Exception) -> int:
    """HTTP status for an exception; anything unexpected is a 500."""
    if isinstance(error, HTTPError):
        return int(error.status_code)
    return int(HTTPStatus.INTERNAL_SERVER_ERROR)


def public_message(error: Exception, debug: bool) -> str:
    """
    Message safe to show a client.

    HTTPError messages are written for clients. Other exceptions may carry
    internals, so they are only shown in debug mode.
    """
    if isinstance(error, HTTPError) or debug:
        return str(error)
    return HTTPStatus.INTERNAL_SERVER_ERROR.phrase


class ExceptionRenderer:
    """
    Renders an exception as an HTML error page.

    This is the renderer used when no component has asked for anything
    else on the current request.
    """

    def __init__(self, error: Exception, request: HTTPRequest, config: "ApiConfig"):
        self.error = error
        self.request = request
        self.config = config

    def controller_class(self) -> Type["Controller"]:
        from .controller import ErrorController
        return ErrorController

    def build_controller(self) -> "Controller":
        return self.controller_class()(self.request, HTTPResponse(), config=self.config)

    def render(self) -> HTTPResponse:
        status = status_for(self.error)
        logger.debug(f"Rendering {type(self.error).__name__} with {type(self).__name__} (status {status})")
        controller = self.build_controller()
        controller.response.status_code(status)

        if isinstance(self.error, MethodNotAllowedError):
            controller.response.header("Allow", ", ".join(self.error.allowed))

        controller.set({
            "message": public_message(self.error, self.config.debug),
            "code": status,
        })
        if self.config.debug:
            controller.set("exception", type(self.error).__name__)

        return controller.render("error")
