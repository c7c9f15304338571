"""
=============================================================================
HTTPAPI CLI ENTRY POINT
=============================================================================

Runs a single request through a small demo application and prints the raw
HTTP response. Handy for seeing how the same action answers a browser and
an API client.

=============================================================================
USAGE
=============================================================================

    # JSON via the route extension
    python -m httpapi GET /articles/1.json

    # JSON via the Accept header
    python -m httpapi GET /articles/1 --accept application/json

    # Browser request → HTML
    python -m httpapi GET /articles/1 --accept "text/html,*/*;q=0.8"

    # API redirect → JSON body + Location
    python -m httpapi GET /articles/old.json

    # Pretty-printed JSON and access log
    python -m httpapi GET /articles.json --debug --log-level DEBUG

=============================================================================
"""

import argparse
import sys

from . import __version__
from .api import ApiComponent
from .config import ApiConfig
from .controller import Controller, Dispatcher
from .errors import NotFoundError
from .middleware import LoggingMiddleware


ARTICLES = {
    "1": {"id": 1, "title": "Content negotiation in practice"},
    "2": {"id": 2, "title": "Redirects are not for machines"},
}


class ArticlesController(Controller):
    """Demo controller used by the CLI."""

    components = [ApiComponent]
    public_actions = ["index", "view"]

    def index(self):
        self.set("articles", list(ARTICLES.values()))
        self.set("pagination", {
            "page": 1,
            "count": len(ARTICLES),
            "links": {"next": None, "prev": None},
        })

    def view(self):
        article = ARTICLES.get(self.request.params["id"])
        if article is None:
            raise NotFoundError(f"No article {self.request.params['id']}")
        self.set("article", article)

    def old(self):
        self.redirect({"route": "article", "id": "1"}, 301)


def build_dispatcher(config: ApiConfig) -> Dispatcher:
    dispatcher = Dispatcher(config=config)
    dispatcher.connect("/articles", ArticlesController, "index", method="GET")
    dispatcher.connect("/articles/old", ArticlesController, "old", method="GET")
    dispatcher.connect("/articles/:id", ArticlesController, "view", method="GET", name="article")
    dispatcher.use(LoggingMiddleware.from_config(config))
    return dispatcher


def main():
    parser = argparse.ArgumentParser(
        description="Run one request through the httpapi demo application",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m httpapi GET /articles/1.json
  python -m httpapi GET /articles/1 --accept application/json
  python -m httpapi GET /articles/old.json
        """
    )

    parser.add_argument("method", help="HTTP method (GET, POST, ...)")
    parser.add_argument("path", help="Request path, e.g. /articles/1.json")
    parser.add_argument("--accept", "-a", default=None, help="Accept header value")
    parser.add_argument("--host", default="localhost:8080", help="Host header value")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument(
        "--log-level", "-l",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)"
    )
    parser.add_argument(
        "--log-format",
        default="text",
        choices=["text", "json"],
        help="Access log format (default: text)"
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args()

    try:
        config = ApiConfig(
            debug=args.debug,
            log_level=args.log_level,
            log_format=args.log_format,
        )
        dispatcher = build_dispatcher(config)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    dispatcher.setup_logging()

    lines = [f"{args.method.upper()} {args.path} HTTP/1.1", f"Host: {args.host}"]
    if args.accept:
        lines.append(f"Accept: {args.accept}")
    raw_request = ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")

    raw_response = dispatcher.handle_bytes(raw_request, ("127.0.0.1", 0))
    sys.stdout.write(raw_response.decode("utf-8", errors="replace") + "\n")


if __name__ == "__main__":
    main()
