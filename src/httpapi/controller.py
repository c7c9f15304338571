"""
=============================================================================
CONTROLLERS, COMPONENTS AND THE DISPATCHER
=============================================================================

The host side of the API layer: a minimal controller lifecycle that calls
component hooks at fixed points.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Dispatcher.handle(request)                                         │
    │        │                                                             │
    │        ├── middleware (logging, ...)                                 │
    │        ▼                                                             │
    │   Router.match ──► controller = UsersController(request, response)  │
    │                          │                                           │
    │                          ├── component.initialize(controller)        │
    │                          ▼                                           │
    │                    controller.view()    ← the action                 │
    │                          │                                           │
    │             ┌────────────┴─────────────┐                             │
    │             ▼                          ▼                             │
    │      controller.render()        controller.redirect(url)             │
    │        before_render hooks        before_redirect hooks              │
    │        View / ApiView               Location + status                │
    │                                     send() + StopRequest             │
    │                                                                      │
    │   StopRequest  → dispatcher returns the already-sent response        │
    │   other errors → exception renderer from request.context             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A fresh controller, and with it fresh component instances, is built for
every request, so no component state can leak from one request into the
next.

=============================================================================
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, Union

from .config import ApiConfig
from .errors import ExceptionRenderer, HTTPError, MethodNotAllowedError, NotFoundError
from .http.request import HTTPRequest, RequestParser, HTTPParseError
from .http.response import HTTPResponse
from .http.router import Route, Router
from .http.status_codes import HTTPStatus
from .middleware.base import Middleware, MiddlewarePipeline
from .view import View


logger = logging.getLogger(__name__)


class StopRequest(Exception):
    """
    Stop processing the current request.

    Raised after a response has been sent (redirects, the 404 redirect
    short-circuit). The dispatcher catches it and returns `response`
    untouched; nothing else runs for the request.
    """

    def __init__(self, response: HTTPResponse):
        super().__init__(response.status_line)
        self.response = response


class Component:
    """
    Base class for controller components.

    Hooks are no-ops; subclasses override the ones they need.
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None, config: Optional[ApiConfig] = None):
        self.settings = dict(settings or {})
        self.config = config or ApiConfig()

    @property
    def name(self) -> str:
        return type(self).__name__

    def initialize(self, controller: "Controller") -> None:
        pass

    def before_render(self, controller: "Controller") -> None:
        pass

    def before_redirect(
        self,
        controller: "Controller",
        url: Any,
        status: Optional[int] = None,
        exit: bool = True,
    ) -> None:
        pass


ComponentSpec = Union[Type[Component], tuple]


class Controller:
    """
    Base controller.

    Subclasses declare actions as methods and optionally:

        components = [ApiComponent]                       # or
        components = [(ApiComponent, {"show_pagination_links": False})]
        public_actions = ["index", "view"]                # no auth needed
        helpers = ["Html"]
        templates = {"view": lambda vars: "<p>...</p>"}   # HTML templates

    Example:

        class UsersController(Controller):
            components = [ApiComponent]

            def view(self):
                self.set("user", {"id": self.request.params["id"]})

            def old(self):
                self.redirect("/users", 301)
    """

    components: Sequence[ComponentSpec] = ()
    public_actions: Sequence[str] = ()
    helpers: Sequence[str] = ()
    templates: Dict[str, Callable[[Dict[str, Any]], str]] = {}
    layout: str = "default"

    def __init__(
        self,
        request: HTTPRequest,
        response: Optional[HTTPResponse] = None,
        router: Optional[Router] = None,
        config: Optional[ApiConfig] = None,
        components: Optional[Sequence[ComponentSpec]] = None,
    ):
        self.request = request
        self.response = response if response is not None else HTTPResponse()
        self.config = config or ApiConfig()
        self.router = router or Router(extensions=self.config.extensions, base_url=self.config.base_url)

        self.action: Optional[str] = None
        self.view_name: Optional[str] = None
        self.view_class: Type[View] = View
        self.layout = type(self).layout
        self.layout_path: Optional[str] = None
        self.helpers: List[str] = list(type(self).helpers)
        self.view_vars: Dict[str, Any] = {}
        self.rendered = False

        specs = components if components is not None else type(self).components
        self._components: List[Component] = [self._load_component(spec) for spec in specs]

        for component in self._components:
            component.initialize(self)

    def _load_component(self, spec: ComponentSpec) -> Component:
        if isinstance(spec, tuple):
            component_cls, settings = spec
        else:
            component_cls, settings = spec, None
        return component_cls(settings, config=self.config)

    def component(self, name: Union[str, Type[Component]]) -> Optional[Component]:
        """Find a loaded component by class or class name."""
        for component in self._components:
            if isinstance(name, str) and component.name == name:
                return component
            if isinstance(name, type) and isinstance(component, name):
                return component
        return None

    # =========================================================================
    # VIEW VARIABLES
    # =========================================================================

    def set(self, name: Union[str, Dict[str, Any]], value: Any = None) -> None:
        """
        Set view variables.

            self.set("user", user)
            self.set({"success": True, "url": url})
        """
        if isinstance(name, dict):
            self.view_vars.update(name)
        else:
            self.view_vars[name] = value

    # =========================================================================
    # RENDERING AND REDIRECTS
    # =========================================================================

    def render(self, view: Optional[str] = None) -> HTTPResponse:
        """Run before_render hooks, then render through view_class."""
        for component in self._components:
            component.before_render(self)

        view_name = view or self.view_name or self.action or "index"
        body = self.view_class(self).render(view_name)
        self.response.set_body(body)
        self.rendered = True
        return self.response

    def redirect(self, url: Any, status: Optional[int] = None, exit: bool = True) -> HTTPResponse:
        """
        Redirect the client.

        Components get the first say through before_redirect (the API
        component ends the request there for API clients). Otherwise this
        is a plain browser redirect: status (default 302) and an absolute
        Location header.
        """
        for component in self._components:
            component.before_redirect(self, url, status, exit)

        code = int(status) if status else HTTPStatus.FOUND
        self.response.status_code(code)
        self.response.header("Location", self.router.url(url, full=True, request=self.request))
        self.rendered = True

        if exit:
            self.response.send()
            raise StopRequest(self.response)
        return self.response

    # =========================================================================
    # ACTIONS
    # =========================================================================

    def invoke_action(self, action: str) -> HTTPResponse:
        """
        Run an action and render it unless it already produced output.

        Raises:
            NotFoundError: Unknown or private action name.
        """
        method = getattr(self, action, None)
        if action.startswith("_") or not callable(method) or hasattr(Controller, action):
            raise NotFoundError(f"Action {type(self).__name__}.{action}() not found")

        self.action = action
        result = method()

        if isinstance(result, HTTPResponse):
            return result
        if not self.rendered:
            self.render()
        return self.response


class ErrorController(Controller):
    """
    Controller used to render errors.

    Its class name is the sentinel the ResponseShaper compares against to
    pick the error layout.
    """

    layout = "error"


class Dispatcher:
    """
    Connects routes to controller actions and runs requests through them.

        dispatcher = Dispatcher(config=ApiConfig(base_url="https://api.example.com"))
        dispatcher.connect("/users/:id", UsersController, "view", method="GET")
        dispatcher.use(LoggingMiddleware())

        response = dispatcher.handle(request)
        raw = dispatcher.handle_bytes(b"GET /users/7.json HTTP/1.1\\r\\n...")
    """

    def __init__(
        self,
        router: Optional[Router] = None,
        config: Optional[ApiConfig] = None,
        exception_renderer: Type[ExceptionRenderer] = ExceptionRenderer,
    ):
        self.config = config or ApiConfig()
        self.config.validate()

        self.router = router or Router(extensions=self.config.extensions, base_url=self.config.base_url)
        self.exception_renderer = exception_renderer

        self._parser = RequestParser()
        self._middleware = MiddlewarePipeline()
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

    def use(self, middleware: Middleware) -> "Dispatcher":
        """Add middleware (first added = outermost)."""
        self._middleware.add(middleware)
        self._handler = None
        return self

    def connect(
        self,
        path: str,
        controller_cls: Type[Controller],
        action: str,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Route:
        """Route a path to Controller.action."""
        return self.router.add_route(path, controller_cls, method, name, action=action)

    def setup_logging(self) -> None:
        """Configure logging from config.log_level."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("httpapi").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Run a request through middleware and the matched controller."""
        if self._handler is None:
            self._handler = self._middleware.wrap(self.dispatch)
        return self._handler(request)

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """Match, build the controller, run the action, render errors."""
        path, extension = self.router.split_extension(request.path)
        if extension:
            request.params["ext"] = extension

        try:
            match = self.router.match(request.method, request.path)
            if match is None:
                allowed = self.router.get_allowed_methods(request.path)
                if allowed:
                    raise MethodNotAllowedError(allowed)
                raise NotFoundError(f"No route matches {path}")

            request.params.update(match.params)
            controller = match.route.handler(
                request,
                HTTPResponse(),
                router=self.router,
                config=self.config,
            )
            return controller.invoke_action(match.route.meta["action"])

        except StopRequest as stop:
            return stop.response

        except Exception as e:
            return self._render_error(e, request)

    def _render_error(self, error: Exception, request: HTTPRequest) -> HTTPResponse:
        if isinstance(error, HTTPError):
            logger.info(f"{request.method} {request.path} → {error.status_code}: {error}")
        else:
            logger.exception(f"Unhandled error in {request.method} {request.path}: {error}")

        renderer_cls = self._exception_renderer_for(request)
        try:
            return renderer_cls(error, request, self.config).render()
        except StopRequest as stop:
            return stop.response
        except Exception as e:
            logger.exception(f"{renderer_cls.__name__} failed: {e}")
            return HTTPResponse(status=HTTPStatus.INTERNAL_SERVER_ERROR).json_body(
                {"error": "Internal Server Error"}
            )

    def _exception_renderer_for(self, request: HTTPRequest) -> Type[ExceptionRenderer]:
        """
        Pick the renderer for an error on this request.

            renderer in request.context ──► use it (set by ApiComponent)
            nothing set (router 404/405) ──► classify here; API → JSON
            browser request             ──► self.exception_renderer
        """
        renderer_cls = request.context.get("exception_renderer")
        if renderer_cls is not None:
            return renderer_cls

        from .api import ApiExceptionRenderer, RequestClassifier

        if RequestClassifier().classify(request).is_api:
            return ApiExceptionRenderer
        return self.exception_renderer

    def handle_bytes(self, data: bytes, client_address: tuple[str, int] = ("", 0)) -> bytes:
        """
        Parse raw request bytes, handle the request, serialize the response.

        Malformed requests get a JSON error with the parser's status code
        and Connection: close.
        """
        try:
            request = self._parser.parse(data, client_address)
        except HTTPParseError as e:
            logger.warning(f"Malformed request from {client_address[0] or '-'}: {e}")
            response = HTTPResponse(status=e.status_code).json_body({"error": str(e)})
            response.header("Connection", "close")
            return response.to_bytes()

        return self.handle(request).to_bytes()
