"""
=============================================================================
API COMPONENT
=============================================================================

Wires the classifier, public-action registry, response shaper and
redirect interceptor into a controller's lifecycle.

=============================================================================
STATE MACHINE
=============================================================================

    ┌───────────────┐  first hook   ┌─────────┐  classify   ┌────────────┐
    │ UNINITIALIZED │ ────────────► │  BOUND  │ ──────────► │ CLASSIFIED │
    └───────────────┘  (any of the  └─────────┘  (same call)└────────────┘
            ▲           three hooks)                               │
            └────────────────────── reset() ───────────────────────┘

ensure_bound() runs on whichever hook fires first (initialize,
before_render, before_redirect) and is a no-op afterwards. Binding:

    1. cache controller / request / response
    2. install detectors on the request, classify, cache the result
    3. API requests only:
         - seed public actions from controller.public_actions (if empty)
         - request.context["exception_renderer"] = ApiExceptionRenderer
         - response.type("json")

=============================================================================
USAGE
=============================================================================

    class UsersController(Controller):
        components = [(ApiComponent, {"show_pagination_links": False})]
        public_actions = ["index", "view"]

        def edit(self):
            self.component(ApiComponent).deny_public("edit")
            ...

=============================================================================
"""

from enum import Enum
from typing import Any, Dict, Optional, TYPE_CHECKING
import logging

from ..config import ApiConfig
from ..controller import Component, StopRequest
from .classifier import ClassificationResult, RequestClassifier
from .exception_renderer import ApiExceptionRenderer
from .public_actions import PublicActionRegistry
from .redirect import RedirectDecision, RedirectInterceptor
from .shaper import ResponseShaper

if TYPE_CHECKING:
    from ..controller import Controller
    from ..http.request import HTTPRequest
    from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


class ComponentState(Enum):
    UNINITIALIZED = "uninitialized"
    BOUND = "bound"
    CLASSIFIED = "classified"


class ApiComponent(Component):
    """
    Turns API requests into a consistent JSON request/response lifecycle.

    Settings:
        show_pagination_links: Value of the showPaginationLinks view
                               variable (default: config value, True).
    """

    def __init__(
        self,
        settings: Optional[Dict[str, Any]] = None,
        config: Optional[ApiConfig] = None,
        classifier: Optional[RequestClassifier] = None,
    ):
        super().__init__(settings, config)
        self.settings.setdefault("show_pagination_links", self.config.show_pagination_links)

        self.classifier = classifier or RequestClassifier()
        self.shaper = ResponseShaper(self.config.error_controller_name)
        self.public_actions = PublicActionRegistry()

        self.reset()

    def reset(self) -> None:
        """Forget everything about the current request (pooled reuse)."""
        self.state = ComponentState.UNINITIALIZED
        self.controller: Optional["Controller"] = None
        self.request: Optional["HTTPRequest"] = None
        self.response: Optional["HTTPResponse"] = None
        self.classification: Optional[ClassificationResult] = None
        self._allow_jsonp = self.config.allow_jsonp
        self.public_actions.clear()

    # =========================================================================
    # SETUP
    # =========================================================================

    @property
    def is_api(self) -> bool:
        return bool(self.classification and self.classification.is_api)

    def ensure_bound(self, controller: "Controller") -> ClassificationResult:
        """Bind and classify on first call; later calls return the cached result."""
        if self.state is ComponentState.UNINITIALIZED:
            self.controller = controller
            self.request = controller.request
            self.response = controller.response
            self.state = ComponentState.BOUND

            try:
                self.classifier.bind(self.request)
                self.classification = self.classifier.classify(self.request)
            except Exception:
                # a failing detector leaves the component unbound
                self.state = ComponentState.UNINITIALIZED
                raise
            self.state = ComponentState.CLASSIFIED

            if self.classification.is_api:
                self._setup_api(controller)

        return self.classification

    def _setup_api(self, controller: "Controller") -> None:
        if controller.public_actions and self.public_actions.seed(controller.public_actions):
            logger.debug(f"Seeded public actions: {sorted(self.public_actions)}")

        self.request.context["exception_renderer"] = ApiExceptionRenderer
        self.request.context["api"] = True
        self.response.type("json")

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def deny_public(self, action: str) -> bool:
        """Remove an action from the public set; False if it was not public."""
        return self.public_actions.deny(action)

    def is_public(self, action: str) -> bool:
        return self.public_actions.is_public(action)

    def allow_jsonp(self, value: bool = True) -> None:
        self._allow_jsonp = bool(value)

    # =========================================================================
    # LIFECYCLE HOOKS
    # =========================================================================

    def initialize(self, controller: "Controller") -> None:
        self.ensure_bound(controller)

    def before_render(self, controller: "Controller") -> None:
        classification = self.ensure_bound(controller)

        decision = self.shaper.shape(
            classification,
            has_error=self.shaper.has_error(self.controller),
            debug=self.config.debug,
            settings=self.settings,
            allow_jsonp=self._allow_jsonp,
        )
        self.shaper.apply(decision, self.controller)

    def before_redirect(
        self,
        controller: "Controller",
        url: Any,
        status: Optional[int] = None,
        exit: bool = True,
    ) -> None:
        """
        Answer API redirects with JSON and stop the request.

        Raises:
            StopRequest: For every API redirect, after the response is sent.
        """
        classification = self.ensure_bound(controller)

        interceptor = RedirectInterceptor(
            lambda target: controller.router.url(target, full=True, request=controller.request)
        )
        decision = interceptor.intercept(classification, url, status, exit)
        if decision is None:
            return

        self._apply_redirect(controller, decision)

    def _apply_redirect(self, controller: "Controller", decision: RedirectDecision) -> None:
        response = controller.response
        controller.view_name = "redirect"

        if not decision.allow_exit:
            logger.debug(f"exit=False ignored for API redirect to {decision.url}")

        if decision.terminal:
            response.status_code(decision.status)
            response.send()
            raise StopRequest(response)

        if decision.location is not None:
            response.status_code(decision.status)
            response.header("Location", decision.location)

        controller.set(decision.body)
        controller.render()

        response.send()
        raise StopRequest(response)
