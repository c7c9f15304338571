"""
=============================================================================
REQUEST CLASSIFIER
=============================================================================

Decides whether a request is an API request.

=============================================================================
DETECTOR TABLE
=============================================================================

Classification is an open table of named predicates ("detectors"). The
"api" answer is the logical OR of every detector flagged as an API format:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  name   predicate                                   api format?     │
    ├─────────────────────────────────────────────────────────────────────┤
    │  json   ext == "json"  OR  Accept lists             yes             │
    │         application/json                                            │
    │  ...    (register more: xml, msgpack, ...)          yes / no        │
    ├─────────────────────────────────────────────────────────────────────┤
    │  api    json OR <every other api format>                            │
    └─────────────────────────────────────────────────────────────────────┘

Adding a format never touches call sites:

    classifier = RequestClassifier()
    classifier.add_detector("xml", lambda r: r.extension == "xml", api_format=True)
    classifier.is_api(request)   # now json OR xml

=============================================================================
WHY THE EXTENSION WINS
=============================================================================

The route extension (/users/1.json) is explicit and cheap to read. The
Accept header is client-controlled and best-effort; a browser that happens
to list application/json would be classified as an API client. That
tradeoff is accepted, not treated as an error.

=============================================================================
INTERVIEW QUESTIONS ABOUT CONTENT NEGOTIATION
=============================================================================

Q: "Why not just look at Accept?"
A: "Clients get Accept wrong all the time, and some cannot set it at all
   (plain links, curl without -H). An extension is unambiguous."

Q: "Why doesn't */* count as accepting JSON?"
A: "Every browser sends */*. Expanding wildcards would turn every page
   view into an API request."

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple
import logging

from ..http.request import HTTPRequest


logger = logging.getLogger(__name__)


Detector = Callable[[HTTPRequest], bool]

JSON_MEDIA_TYPE = "application/json"


def detect_json(request: HTTPRequest) -> bool:
    """
    True if the request wants JSON.

    1. Route extension "json"  → True, Accept is not consulted
    2. Otherwise              → Accept header lists application/json
    """
    if request.extension == "json":
        return True
    return request.accepts(JSON_MEDIA_TYPE)


@dataclass(frozen=True)
class ClassificationResult:
    """Classification of one request, computed once and cached."""

    is_json: bool
    is_api: bool


class RequestClassifier:
    """
    Evaluates format detectors against a request.

    Args:
        detectors: Extra named detectors, merged over the built-in "json".
        api_formats: Detector names OR-ed together for is_api().
                     Defaults to ("json",).
    """

    def __init__(
        self,
        detectors: Optional[Dict[str, Detector]] = None,
        api_formats: Iterable[str] = ("json",),
    ):
        self._detectors: Dict[str, Detector] = {"json": detect_json}
        self._detectors.update(detectors or {})

        self._api_formats: Tuple[str, ...] = tuple(api_formats)
        for name in self._api_formats:
            if name not in self._detectors:
                raise ValueError(f"No detector registered for API format {name!r}")

    @property
    def api_formats(self) -> Tuple[str, ...]:
        return self._api_formats

    def add_detector(self, name: str, detector: Detector, api_format: bool = False) -> None:
        """Register a detector; api_format=True makes it count towards is_api()."""
        self._detectors[name] = detector
        if api_format and name not in self._api_formats:
            self._api_formats = self._api_formats + (name,)

    def detect(self, name: str, request: HTTPRequest) -> bool:
        """Evaluate one named detector (unknown names are False)."""
        detector = self._detectors.get(name)
        return bool(detector(request)) if detector is not None else False

    def is_json(self, request: HTTPRequest) -> bool:
        return self.detect("json", request)

    def is_api(self, request: HTTPRequest) -> bool:
        """OR of every API-format detector."""
        return any(self.detect(name, request) for name in self._api_formats)

    def classify(self, request: HTTPRequest) -> ClassificationResult:
        result = ClassificationResult(
            is_json=self.is_json(request),
            is_api=self.is_api(request),
        )
        logger.debug(
            f"Classified {request.method} {request.path}: "
            f"json={result.is_json} api={result.is_api}"
        )
        return result

    def bind(self, request: HTTPRequest) -> None:
        """
        Install the detectors on the request's detector surface.

        Afterwards host code can ask request.is_("json") / request.is_("api")
        without holding a reference to the classifier.
        """
        for name in self._detectors:
            request.add_detector(name, lambda r, _name=name: self.detect(_name, r))
        request.add_detector("api", self.is_api)
