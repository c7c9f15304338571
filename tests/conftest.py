"""
pytest configuration and fixtures.
"""

from typing import Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from httpapi import ApiComponent, ApiConfig, Controller, Dispatcher
from httpapi.http import HTTPRequest, HTTPResponse, Router


def make_request(
    path: str = "/users/7",
    method: str = "GET",
    ext: Optional[str] = None,
    accept: Optional[str] = None,
    query: Optional[dict] = None,
    host: str = "example.com",
) -> HTTPRequest:
    """Helper to build a request the way the dispatcher would."""
    headers = {"host": host}
    if accept is not None:
        headers["accept"] = accept
    request = HTTPRequest(
        method=method,
        path=path,
        headers=headers,
        query_params={k: [v] for k, v in (query or {}).items()},
    )
    if ext:
        request.params["ext"] = ext
    return request


class UsersController(Controller):
    """Controller used across the lifecycle tests."""

    components = [ApiComponent]
    public_actions = ["index", "view", "edit"]

    def index(self):
        self.set("users", [{"id": 1}, {"id": 2}])
        self.set("pagination", {"page": 1, "links": {"next": "/users?page=2"}})

    def view(self):
        self.set("user", {"id": self.request.params.get("id")})

    def moved(self):
        self.redirect("/users", 301)

    def elsewhere(self):
        self.redirect("/users")

    def gone(self):
        self.redirect("/users", 404)

    def see_other(self):
        self.redirect("/users", 303)

    def edit(self):
        api = self.component(ApiComponent)
        api.deny_public("edit")
        self.set("public", {"edit": api.is_public("edit"), "view": api.is_public("view")})

    def broken(self):
        raise RuntimeError("database on fire")


@pytest.fixture
def config() -> ApiConfig:
    """Default test configuration."""
    return ApiConfig()


@pytest.fixture
def router() -> Router:
    return Router(extensions=["json"])


@pytest.fixture
def json_ext_request() -> HTTPRequest:
    """/users/7.json after extension splitting."""
    return make_request(ext="json")


@pytest.fixture
def json_accept_request() -> HTTPRequest:
    """No extension, but Accept lists application/json."""
    return make_request(accept="application/json")


@pytest.fixture
def browser_request() -> HTTPRequest:
    """Typical browser navigation."""
    return make_request(accept="text/html,application/xhtml+xml,*/*;q=0.8")


@pytest.fixture
def api_controller(json_ext_request: HTTPRequest, router: Router) -> UsersController:
    return UsersController(json_ext_request, HTTPResponse(), router=router)


@pytest.fixture
def html_controller(browser_request: HTTPRequest, router: Router) -> UsersController:
    return UsersController(browser_request, HTTPResponse(), router=router)


@pytest.fixture
def dispatcher() -> Dispatcher:
    """Dispatcher with every UsersController action routed."""
    dispatcher = Dispatcher(config=ApiConfig())
    dispatcher.connect("/users", UsersController, "index", method="GET")
    for action in ("moved", "elsewhere", "gone", "see_other", "edit", "broken"):
        dispatcher.connect(f"/users/{action}", UsersController, action, method="GET")
    dispatcher.connect("/users/:id", UsersController, "view", method="GET", name="user")
    return dispatcher


@pytest.fixture
def sample_json_request() -> bytes:
    """Raw GET with a .json extension."""
    return (
        b"GET /users/7.json HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_browser_request() -> bytes:
    """Raw GET as a browser would send it."""
    return (
        b"GET /users/7 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Accept: text/html,*/*;q=0.8\r\n"
        b"\r\n"
    )
