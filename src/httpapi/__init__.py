"""
=============================================================================
HTTPAPI - API Request Classification and Response Negotiation
=============================================================================

A layer between routing/dispatch and view rendering that recognises API
requests and keeps their entire lifecycle machine-readable.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTPAPI ARCHITECTURE                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Dispatcher ──► Router ──► Controller ──► View / ApiView            │
    │                                 │                                    │
    │                           ApiComponent                               │
    │                 ┌───────────────┼────────────────┐                   │
    │                 ▼               ▼                ▼                   │
    │        RequestClassifier  ResponseShaper  RedirectInterceptor        │
    │         json? api?         layout/view     301/302 → JSON body       │
    │                            content type    404 → bare status, stop   │
    │                                                                      │
    │        PublicActionRegistry       ApiExceptionRenderer               │
    │         deny_public()              errors as JSON                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    from httpapi import ApiComponent, ApiConfig, Controller, Dispatcher

    class UsersController(Controller):
        components = [ApiComponent]

        def view(self):
            self.set("user", {"id": self.request.params["id"]})

        def moved(self):
            self.redirect("/users", 301)

    dispatcher = Dispatcher(config=ApiConfig())
    dispatcher.connect("/users/:id", UsersController, "view", method="GET")

    # GET /users/7.json  → {"success": true, "data": {"user": {"id": "7"}}}
    # GET /users/7       → HTML page (unless Accept: application/json)

=============================================================================
"""

__version__ = "1.0.0"

from .config import ApiConfig
from .controller import Component, Controller, Dispatcher, ErrorController, StopRequest
from .api import ApiComponent, RequestClassifier

__all__ = [
    "ApiConfig",
    "Component",
    "Controller",
    "Dispatcher",
    "ErrorController",
    "StopRequest",
    "ApiComponent",
    "RequestClassifier",
    "__version__",
]
