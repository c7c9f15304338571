"""
=============================================================================
URL ROUTER
=============================================================================

Path-based routing with:
- Static paths:        /users
- Dynamic parameters:  /users/:id
- Wildcard paths:      /files/*path
- Route extensions:    /users/42.json  → params {"id": "42", "ext": "json"}
- URL resolution:      router.url("/users", full=True) → "http://host/users"

=============================================================================
ROUTE EXTENSIONS
=============================================================================

Extensions are the explicit way for a client to ask for a format. The
router strips a *registered* extension before matching, so one route
serves every format:

    Router(extensions=["json"])

    GET /users/42.json
          │
          ├── "json" is registered → path "/users/42", ext "json"
          ▼
    Route /users/:id   → params {"id": "42"}, extension "json"

    GET /files/report.pdf
          │
          └── "pdf" is not registered → path matched as-is

=============================================================================
ABSOLUTE URLS
=============================================================================

Redirect bodies sent to API clients must carry absolute URLs (the client
has no page to resolve a relative URL against). `url(target, full=True)`
resolves, in order:

    1. Already absolute ("https://...")  → unchanged
    2. Named route {"route": "user", "id": "7"} → reverse-routed path
    3. Path "/users/7"                   → base_url + path
       base_url comes from the router, else from the request's scheme+host

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, Any, List, Union, Iterable
from urllib.parse import urlsplit
import logging
import re

from .request import HTTPRequest


logger = logging.getLogger(__name__)


Handler = Callable[..., Any]
UrlTarget = Union[str, Dict[str, str]]


@dataclass
class Route:
    """A URL pattern bound to a handler."""

    path: str
    method: Optional[str]
    handler: Handler
    name: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _param_names: List[str] = field(default_factory=list, repr=False)


@dataclass
class RouteMatch:
    """
    Result of a successful route match.

        Pattern: /users/:id      Path: /users/123.json
        Result:  RouteMatch(route=<Route>, params={"id": "123"}, extension="json")
    """
    route: Route
    params: Dict[str, str]
    extension: Optional[str] = None


class Router:
    """
    HTTP request router with path parameters and route extensions.

        router = Router(extensions=["json"], base_url="https://api.example.com")

        @router.get("/users/:id", name="user")
        def view_user(request):
            ...

        router.match("GET", "/users/7.json")
        # RouteMatch(params={"id": "7"}, extension="json")

        router.url({"route": "user", "id": "7"}, full=True)
        # "https://api.example.com/users/7"
    """

    def __init__(
        self,
        prefix: str = "",
        extensions: Iterable[str] = (),
        base_url: Optional[str] = None,
    ):
        self.prefix = prefix.rstrip("/")
        self.extensions = {ext.lower().lstrip(".") for ext in extensions}
        self.base_url = base_url.rstrip("/") if base_url else None
        self._routes: List[Route] = []
        self._named_routes: Dict[str, Route] = {}

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
        name: Optional[str] = None,
        **meta: Any
    ) -> Route:
        """
        Register a route.

        Args:
            path: URL pattern (e.g., /users/:id)
            handler: Callable invoked for matching requests
            method: HTTP method (None for any method)
            name: Optional route name for reverse routing
            **meta: Additional metadata (accessible via route.meta)

        Returns:
            The registered Route
        """
        full_path = self.prefix + path
        pattern, param_names = self._compile_pattern(full_path)

        route = Route(
            path=full_path,
            method=method.upper() if method else None,
            handler=handler,
            name=name,
            meta=meta,
            _pattern=pattern,
            _param_names=param_names,
        )
        self._routes.append(route)

        if name:
            self._named_routes[name] = route

        logger.debug(f"Route added: {route.method or 'ANY'} {route.path}")
        return route

    def _compile_pattern(self, path: str) -> tuple[re.Pattern, List[str]]:
        """
        Compile a path pattern into an anchored regex.

            /users/:id/posts/*rest
            → ^/users/(?P<id>[^/]+)/posts/(?P<rest>.*)$
        """
        param_names: List[str] = []
        regex_parts = ["^"]

        for segment in path.split("/"):
            if not segment:
                continue

            regex_parts.append("/")

            if segment.startswith(":"):
                param_name = segment[1:]
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>[^/]+)")
            elif segment.startswith("*"):
                param_name = segment[1:] or "wildcard"
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>.*)")
                break  # wildcard consumes the rest
            else:
                regex_parts.append(re.escape(segment))

        if len(regex_parts) == 1:
            regex_parts.append("/")  # root route

        regex_parts.append("$")
        return re.compile("".join(regex_parts)), param_names

    def route(self, path: str, method: Optional[str] = None, name: Optional[str] = None, **meta: Any):
        """Decorator form of add_route()."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method, name, **meta)
            return handler
        return decorator

    def get(self, path: str, name: Optional[str] = None, **meta: Any):
        return self.route(path, "GET", name, **meta)

    def post(self, path: str, name: Optional[str] = None, **meta: Any):
        return self.route(path, "POST", name, **meta)

    def put(self, path: str, name: Optional[str] = None, **meta: Any):
        return self.route(path, "PUT", name, **meta)

    def delete(self, path: str, name: Optional[str] = None, **meta: Any):
        return self.route(path, "DELETE", name, **meta)

    # =========================================================================
    # MATCHING
    # =========================================================================

    def split_extension(self, path: str) -> tuple[str, Optional[str]]:
        """
        Split a registered extension off the last path segment.

            "/users/42.json" → ("/users/42", "json")   if "json" registered
            "/files/a.pdf"   → ("/files/a.pdf", None)  if "pdf" is not
        """
        head, _, last = path.rpartition("/")
        stem, dot, ext = last.rpartition(".")
        if dot and stem and ext.lower() in self.extensions:
            return f"{head}/{stem}", ext.lower()
        return path, None

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path.

        First-registered, first-matched. A registered extension is
        stripped before matching and reported on the RouteMatch.
        """
        path, extension = self.split_extension(path)
        path = "/" + path.strip("/") if path != "/" else "/"

        for route in self._routes:
            if route.method and route.method != method.upper():
                continue
            if route._pattern:
                found = route._pattern.match(path)
                if found:
                    return RouteMatch(route=route, params=found.groupdict(), extension=extension)

        return None

    def get_allowed_methods(self, path: str) -> List[str]:
        """Methods registered for a path (for 405 responses)."""
        path, _ = self.split_extension(path)
        path = "/" + path.strip("/") if path != "/" else "/"
        methods = set()

        for route in self._routes:
            if route._pattern and route._pattern.match(path):
                if not route.method:
                    return ["DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT"]
                methods.add(route.method)

        return sorted(methods)

    # =========================================================================
    # URL RESOLUTION
    # =========================================================================

    def url_for(self, name: str, **params: str) -> Optional[str]:
        """Reverse-route a named route; None if the name is unknown."""
        route = self._named_routes.get(name)
        if not route:
            return None

        url = route.path
        for param_name, value in params.items():
            url = url.replace(f":{param_name}", str(value))
            url = url.replace(f"*{param_name}", str(value))
        return url

    def url(
        self,
        target: UrlTarget = "/",
        full: bool = False,
        request: Optional[HTTPRequest] = None,
    ) -> str:
        """
        Resolve a redirect/link target to a URL.

        Args:
            target: Absolute URL, path, or {"route": name, **params}
            full: Return an absolute URL (scheme://host/path)
            request: Supplies scheme and Host when no base_url is configured

        Returns:
            The resolved URL. Unknown route names resolve to "/", and
            malformed targets are passed through untouched; validation is
            not this method's job.
        """
        if isinstance(target, dict):
            params = dict(target)
            name = params.pop("route", None)
            ext = params.pop("ext", None)
            path = (self.url_for(name, **params) if name else None) or "/"
            if ext:
                path = f"{path}.{ext}"
        else:
            path = target or "/"

        if urlsplit(path).scheme:
            return path

        if not path.startswith("/"):
            path = "/" + path

        if not full:
            return path

        return self._base(request) + path

    def _base(self, request: Optional[HTTPRequest]) -> str:
        if self.base_url:
            return self.base_url
        if request is not None and request.host:
            return f"{request.scheme}://{request.host}"
        return "http://localhost"

    def routes(self) -> List[Route]:
        """All registered routes."""
        return list(self._routes)
