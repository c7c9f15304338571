"""
Unit tests for the response shaper.
"""

from httpapi import Controller, ErrorController
from httpapi.api.classifier import ClassificationResult
from httpapi.api.shaper import ResponseDecision, ResponseShaper
from httpapi.view import ApiView, View

from conftest import make_request


API = ClassificationResult(is_json=True, is_api=True)
BROWSER = ClassificationResult(is_json=False, is_api=False)


class TestShape:
    """Tests for ResponseShaper.shape()."""

    def test_non_api_is_noop(self):
        """Test that browser requests are left alone."""
        decision = ResponseShaper().shape(BROWSER, has_error=False, debug=True)
        assert decision == ResponseDecision.noop()
        assert decision.applies is False

    def test_api_success(self):
        """Test the decision for a normal API render."""
        decision = ResponseShaper().shape(API, has_error=False, debug=False)

        assert decision.applies is True
        assert decision.content_type == "json"
        assert decision.view_class is ApiView
        assert decision.layout == "default"
        assert decision.layout_path is None
        assert decision.helpers == ()
        assert decision.view_vars == {"allowJsonp": False, "showPaginationLinks": True}

    def test_api_error_layout(self):
        """Test that the error controller gets the error layout."""
        decision = ResponseShaper().shape(API, has_error=True, debug=False)
        assert decision.layout == "error"

    def test_debug_adds_json_format_helper(self):
        """Test the JsonFormat helper in debug mode."""
        decision = ResponseShaper().shape(API, has_error=False, debug=True)
        assert decision.helpers == ("JsonFormat",)

    def test_pagination_links_setting(self):
        """Test that the component setting reaches the view vars."""
        decision = ResponseShaper().shape(
            API, has_error=False, debug=False,
            settings={"show_pagination_links": False},
        )
        assert decision.view_vars["showPaginationLinks"] is False

    def test_allow_jsonp(self):
        """Test the JSONP toggle."""
        decision = ResponseShaper().shape(API, has_error=False, debug=False, allow_jsonp=True)
        assert decision.view_vars["allowJsonp"] is True


class TestHasError:
    """Tests for ResponseShaper.has_error()."""

    def test_error_controller(self):
        """Test the error controller sentinel."""
        controller = ErrorController(make_request())
        assert ResponseShaper().has_error(controller) is True

    def test_regular_controller(self):
        """Test a regular controller."""
        assert ResponseShaper().has_error(Controller(make_request())) is False

    def test_custom_error_controller_name(self):
        """Test a host-specific error controller name."""
        class AppErrorController(Controller):
            pass

        shaper = ResponseShaper("AppErrorController")
        assert shaper.has_error(AppErrorController(make_request())) is True
        assert shaper.has_error(ErrorController(make_request())) is False


class TestApply:
    """Tests for ResponseShaper.apply()."""

    def test_apply_api_decision(self):
        """Test writing a decision onto a controller."""
        controller = Controller(make_request(ext="json"))
        controller.layout_path = "json"

        shaper = ResponseShaper()
        shaper.apply(shaper.shape(API, has_error=False, debug=True), controller)

        assert controller.view_class is ApiView
        assert controller.layout == "default"
        assert controller.layout_path is None
        assert controller.helpers == ["JsonFormat"]
        assert controller.view_vars["showPaginationLinks"] is True
        assert controller.response.content_type == "application/json; charset=utf-8"

    def test_helper_appended_once(self):
        """Test that applying twice does not duplicate the helper."""
        controller = Controller(make_request(ext="json"))
        shaper = ResponseShaper()
        decision = shaper.shape(API, has_error=False, debug=True)

        shaper.apply(decision, controller)
        shaper.apply(decision, controller)

        assert controller.helpers == ["JsonFormat"]

    def test_apply_noop(self):
        """Test that a no-op decision changes nothing."""
        controller = Controller(make_request())
        controller.layout_path = "themes"

        ResponseShaper().apply(ResponseDecision.noop(), controller)

        assert controller.view_class is View
        assert controller.layout_path == "themes"
        assert controller.view_vars == {}
        assert "Content-Type" not in controller.response.headers
