"""
Exception rendering for API requests.

Installed per request by ApiComponent (request.context["exception_renderer"])
so API clients never see an HTML error page:

    {"success": false, "data": {"message": "No such user", "code": 404}}
"""

from typing import TYPE_CHECKING

from ..errors import ExceptionRenderer

if TYPE_CHECKING:
    from ..controller import Controller


class ApiExceptionRenderer(ExceptionRenderer):
    """
    Renders exceptions through an ErrorController carrying an ApiComponent.

    The component's before_render hook sees the error controller and picks
    the "error" layout, so error bodies come out of the same ApiView as
    every other API response.
    """

    def build_controller(self) -> "Controller":
        from .component import ApiComponent

        return self.controller_class()(
            self.request,
            config=self.config,
            components=[ApiComponent],
        )
