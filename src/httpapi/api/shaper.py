"""
=============================================================================
RESPONSE SHAPER
=============================================================================

Decides how an API response is rendered, right before rendering.

=============================================================================
DECISION TABLE
=============================================================================

    ┌──────────────┬────────────┬────────────────────────────────────────┐
    │ is_api       │ has_error  │ decision                               │
    ├──────────────┼────────────┼────────────────────────────────────────┤
    │ False        │ (any)      │ no-op: the HTML pipeline is untouched  │
    │ True         │ False      │ json, ApiView, layout "default"        │
    │ True         │ True       │ json, ApiView, layout "error"          │
    └──────────────┴────────────┴────────────────────────────────────────┘

    For every API decision:
      - layout_path → None          (a stale path composes "json/default")
      - helpers    += ["JsonFormat"] only when debug is on, appended once
      - view vars    allowJsonp, showPaginationLinks (default True)

`shape()` only decides; `apply()` writes the decision onto the controller.
Keeping the two apart lets tests assert on the decision without building
a controller.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TYPE_CHECKING
import logging

from ..view import ApiView, JsonFormatHelper, View
from .classifier import ClassificationResult

if TYPE_CHECKING:
    from ..controller import Controller


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponseDecision:
    """How to render one response. `applies=False` means leave it alone."""

    applies: bool
    content_type: Optional[str] = None
    layout: Optional[str] = None
    layout_path: Optional[str] = None
    view_class: Optional[Type[View]] = None
    helpers: Tuple[str, ...] = ()
    view_vars: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def noop(cls) -> "ResponseDecision":
        return cls(applies=False)


class ResponseShaper:
    """Builds and applies ResponseDecisions."""

    ERROR_LAYOUT = "error"
    DEFAULT_LAYOUT = "default"

    def __init__(self, error_controller_name: str = "ErrorController"):
        self.error_controller_name = error_controller_name

    def has_error(self, controller: Any) -> bool:
        """True iff the controller is the host's error controller (by class name)."""
        return type(controller).__name__ == self.error_controller_name

    def shape(
        self,
        classification: ClassificationResult,
        has_error: bool,
        debug: bool,
        settings: Optional[Mapping[str, Any]] = None,
        allow_jsonp: bool = False,
    ) -> ResponseDecision:
        if not classification.is_api:
            return ResponseDecision.noop()

        settings = settings or {}
        show_pagination_links = settings.get("show_pagination_links", True)

        return ResponseDecision(
            applies=True,
            content_type="json",
            layout=self.ERROR_LAYOUT if has_error else self.DEFAULT_LAYOUT,
            layout_path=None,
            view_class=ApiView,
            helpers=(JsonFormatHelper.name,) if debug else (),
            view_vars={
                "allowJsonp": bool(allow_jsonp),
                "showPaginationLinks": bool(show_pagination_links),
            },
        )

    def apply(self, decision: ResponseDecision, controller: "Controller") -> None:
        """Write a decision onto the controller and its response."""
        if not decision.applies:
            return

        controller.response.type(decision.content_type)
        controller.view_class = decision.view_class

        for helper in decision.helpers:
            if helper not in controller.helpers:
                controller.helpers.append(helper)

        controller.layout = decision.layout
        controller.layout_path = None
        controller.set(dict(decision.view_vars))

        logger.debug(
            f"{type(controller).__name__}: API render with layout {decision.layout!r}"
        )
