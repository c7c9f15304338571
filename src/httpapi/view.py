"""
=============================================================================
VIEWS
=============================================================================

Turns a controller's view variables into a response body.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         VIEW SELECTION                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   controller.view_class = View       controller.view_class = ApiView │
    │   (browser requests)                 (set by the ResponseShaper)     │
    │           │                                     │                    │
    │           ▼                                     ▼                    │
    │   <html> layout "default"/"error"     {"success": true,  "data": …}  │
    │                                       {"success": false, "data": …}  │
    │                                       {"success", "url", "status"}   │
    │                                         ↑ view "redirect", no layout │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
LAYOUT PATHS
=============================================================================

A layout is looked up as "<layout_path>/<layout>" when layout_path is set.
ApiView only knows the bare "default" and "error" layouts, so a leftover
layout_path (say "json" from an earlier phase) would produce
"json/default" and fail with MissingLayoutError. The ResponseShaper clears
layout_path on every API render for exactly this reason.

=============================================================================
"""

from html import escape
from string import Template
from typing import Any, Dict, TYPE_CHECKING
import json
import re

from .errors import MissingLayoutError

if TYPE_CHECKING:
    from .controller import Controller


class JsonFormatHelper:
    """
    Debug helper: pretty-prints JSON output.

    Added to the controller's helpers by the ResponseShaper when the
    global debug flag is on.
    """

    name = "JsonFormat"

    def __init__(self, indent: int = 2):
        self.indent = indent

    def encode(self, data: Any) -> str:
        return json.dumps(data, indent=self.indent, ensure_ascii=False, default=str)


HELPERS = {
    JsonFormatHelper.name: JsonFormatHelper,
}


class View:
    """
    HTML view.

    Renders `controller.templates[view]` when the controller provides a
    template callable for the view, otherwise an escaped listing of the
    view variables, then wraps the result in the selected layout.
    """

    content_type = "html"

    LAYOUTS: Dict[str, Template] = {
        "default": Template(
            "<!DOCTYPE html>\n<html>\n<head><title>$title</title></head>\n"
            "<body>\n$content\n</body>\n</html>\n"
        ),
        "error": Template(
            "<!DOCTYPE html>\n<html>\n<head><title>Error $code</title></head>\n"
            "<body>\n<h1>Error $code</h1>\n$content\n</body>\n</html>\n"
        ),
    }

    def __init__(self, controller: "Controller"):
        self.controller = controller
        self.request = controller.request
        self.response = controller.response
        self.view_vars: Dict[str, Any] = dict(controller.view_vars)
        self.helpers = list(controller.helpers)
        self.layout = controller.layout
        self.layout_path = controller.layout_path

    def layout_name(self) -> str:
        if self.layout_path:
            return f"{self.layout_path}/{self.layout}"
        return self.layout

    def render(self, view: str) -> str:
        if "Content-Type" not in self.response.headers:
            self.response.type(self.content_type)
        return self.render_layout(self.render_view(view))

    def render_view(self, view: str) -> str:
        template = getattr(self.controller, "templates", {}).get(view)
        if template is not None:
            return template(self.view_vars)

        rows = "".join(
            f"<dt>{escape(str(name))}</dt><dd>{escape(str(value))}</dd>"
            for name, value in self.view_vars.items()
        )
        return f"<dl>{rows}</dl>"

    def render_layout(self, content: str) -> str:
        name = self.layout_name()
        layout = self.LAYOUTS.get(name)
        if layout is None:
            raise MissingLayoutError(f"Layout not found: {name}")
        return layout.safe_substitute(
            content=content,
            title=escape(str(self.view_vars.get("title", ""))),
            code=escape(str(self.view_vars.get("code", ""))),
        )


class ApiView(View):
    """
    JSON view for API requests.

    =========================================================================
    OUTPUT CONTRACT
    =========================================================================

    Layout "default":
        {"success": true, "data": <data>, "pagination": {...}?}

    Layout "error":
        {"success": false, "data": {"message": ..., "code": ...}}

    View "redirect" (no layout):
        {"success": true, "url": "http://host/path", "status": 302}

    <data> is the "data" view variable when set, otherwise every view
    variable that is not one of the reserved control variables below.

    =========================================================================
    JSONP
    =========================================================================

    When the allowJsonp view variable is true and the request carries a
    valid callback (?callback=handleUsers), the body becomes

        handleUsers({...});

    with an application/javascript Content-Type. The "redirect" view is
    never wrapped: redirect bodies are always plain JSON.

    =========================================================================
    """

    content_type = "json"

    LAYOUT_SUCCESS = {
        "default": True,
        "error": False,
    }

    RESERVED_VARS = {"allowJsonp", "showPaginationLinks", "pagination", "success", "title"}

    REDIRECT_FIELDS = ("success", "url", "status")

    CALLBACK_PATTERN = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")

    def render(self, view: str) -> str:
        if view == "redirect":
            payload = {key: self.view_vars.get(key) for key in self.REDIRECT_FIELDS}
        else:
            payload = self._layout_payload()

        body = self._encode(payload)

        callback = None if view == "redirect" else self._jsonp_callback()
        if callback:
            self.response.type("javascript")
            return f"{callback}({body});"

        self.response.type(self.content_type)
        return body

    def _layout_payload(self) -> Dict[str, Any]:
        name = self.layout_name()
        if name not in self.LAYOUT_SUCCESS:
            raise MissingLayoutError(f"Layout not found: {name}")

        if "data" in self.view_vars:
            data = self.view_vars["data"]
        else:
            data = {
                key: value for key, value in self.view_vars.items()
                if key not in self.RESERVED_VARS
            }

        payload: Dict[str, Any] = {"success": self.LAYOUT_SUCCESS[name], "data": data}

        pagination = self.view_vars.get("pagination")
        if pagination is not None:
            pagination = dict(pagination)
            if not self.view_vars.get("showPaginationLinks", True):
                pagination.pop("links", None)
            payload["pagination"] = pagination

        return payload

    def _encode(self, payload: Dict[str, Any]) -> str:
        for helper_name in self.helpers:
            helper_cls = HELPERS.get(helper_name)
            if helper_cls is not None:
                return helper_cls().encode(payload)
        return json.dumps(payload, ensure_ascii=False, default=str)

    def _jsonp_callback(self):
        if not self.view_vars.get("allowJsonp"):
            return None

        config = getattr(self.controller, "config", None)
        param = config.jsonp_callback_param if config is not None else "callback"
        callback = self.request.get_query(param)
        if callback and self.CALLBACK_PATTERN.match(callback):
            return callback
        return None
