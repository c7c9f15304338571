"""
=============================================================================
API LAYER
=============================================================================

Classifies requests as API (JSON) requests and keeps their whole
lifecycle machine-readable:

    classifier.py          is_json / is_api detector table
    public_actions.py      actions exempt from authentication
    shaper.py              content type, view class, layout, view vars
    redirect.py            JSON answers instead of browser redirects
    exception_renderer.py  JSON error bodies
    component.py           ApiComponent: wires it all into the controller

=============================================================================
"""

from .classifier import ClassificationResult, RequestClassifier, detect_json
from .public_actions import PublicActionRegistry
from .shaper import ResponseDecision, ResponseShaper
from .redirect import RedirectDecision, RedirectInterceptor, normalize_status
from .exception_renderer import ApiExceptionRenderer
from .component import ApiComponent, ComponentState

__all__ = [
    "ClassificationResult",
    "RequestClassifier",
    "detect_json",
    "PublicActionRegistry",
    "ResponseDecision",
    "ResponseShaper",
    "RedirectDecision",
    "RedirectInterceptor",
    "normalize_status",
    "ApiExceptionRenderer",
    "ApiComponent",
    "ComponentState",
]
