"""
=============================================================================
BASE MIDDLEWARE INTERFACE
=============================================================================

Middleware wraps the dispatcher (Chain of Responsibility):

    Request ────────────────────────────────────────────►

    ┌──────────┐    ┌──────────┐    ┌──────────────────────┐
    │ Logging  │───►│  Other   │───►│ Dispatcher.dispatch  │
    │   MW     │    │   MW     │    │ (controller + API    │
    └────┬─────┘    └────┬─────┘    │  component hooks)    │
         │               │          └──────────┬───────────┘
    ◄────┴───────────────┴─────────────────────┘
                      Response

Each middleware may act before calling next(request), after it, or return
a response without calling next at all (short-circuit).

=============================================================================
"""

from abc import ABC, abstractmethod
from functools import partial
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# Signature of the next middleware or the final handler
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Abstract base class for middleware.

        class MyMiddleware(Middleware):
            def __call__(self, request, next):
                # before
                response = next(request)
                # after
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """Process the request; call next(request) unless short-circuiting."""

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Ordered middleware around the dispatcher.

    First added = outermost:

        pipeline.add(LoggingMiddleware())
        handler = pipeline.wrap(dispatcher.dispatch)
        response = handler(request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    @property
    def names(self) -> List[str]:
        """Middleware names, outermost first."""
        return [middleware.name for middleware in self._middleware]

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Bind each middleware's `next` to the handler inside it.

        [A, B] around dispatch becomes A(next=B(next=dispatch)).
        """
        for middleware in reversed(self._middleware):
            handler = partial(middleware, next=handler)
        return handler
