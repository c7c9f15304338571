"""
Unit tests for the redirect interceptor.
"""

import pytest

from httpapi.api.classifier import ClassificationResult
from httpapi.api.redirect import RedirectInterceptor, normalize_status


API = ClassificationResult(is_json=True, is_api=True)
BROWSER = ClassificationResult(is_json=False, is_api=False)


def resolve(target):
    return f"http://example.com{target}"


class TestNormalizeStatus:
    """Tests for normalize_status()."""

    @pytest.mark.parametrize("status", [None, 0, ""])
    def test_missing_status_is_302(self, status):
        """Test that a missing status becomes 302."""
        assert normalize_status(status) == 302

    def test_numeric_string(self):
        """Test a status given as a string."""
        assert normalize_status("301") == 301

    @pytest.mark.parametrize("status", ["abc", "3.5", object()])
    def test_non_numeric_status_rejected(self, status):
        """Test that a status that is not an integer raises ValueError."""
        with pytest.raises(ValueError, match="Invalid redirect status"):
            normalize_status(status)


class TestRedirectInterceptor:
    """Tests for RedirectInterceptor.intercept()."""

    def test_non_api_passes_through(self):
        """Test that browser redirects are not intercepted."""
        assert RedirectInterceptor(resolve).intercept(BROWSER, "/users", 301) is None

    def test_404_is_terminal(self):
        """Test the bare 404 answer."""
        decision = RedirectInterceptor(resolve).intercept(API, "/users", 404)

        assert decision.terminal is True
        assert decision.status == 404
        assert decision.body is None
        assert decision.location is None
        assert decision.sets_status is True

    def test_301_sets_location_and_body(self):
        """Test a permanent redirect."""
        decision = RedirectInterceptor(resolve).intercept(API, "/users", 301)

        assert decision.terminal is False
        assert decision.location == "http://example.com/users"
        assert decision.body == {
            "success": True,
            "url": "http://example.com/users",
            "status": 301,
        }

    def test_default_status(self):
        """Test that a redirect without status is a 302."""
        decision = RedirectInterceptor(resolve).intercept(API, "/users")

        assert decision.status == 302
        assert decision.location == "http://example.com/users"
        assert decision.body["status"] == 302

    def test_other_status_has_body_but_no_location(self):
        """Test that 303 gets the JSON body without a Location header."""
        decision = RedirectInterceptor(resolve).intercept(API, "/users", 303)

        assert decision.location is None
        assert decision.sets_status is False
        assert decision.body == {
            "success": True,
            "url": "http://example.com/users",
            "status": 303,
        }

    def test_allow_exit_is_carried(self):
        """Test that the exit flag is recorded on the decision."""
        decision = RedirectInterceptor(resolve).intercept(API, "/users", 302, allow_exit=False)
        assert decision.allow_exit is False

    def test_resolver_receives_target(self):
        """Test that route-style targets go to the resolver untouched."""
        seen = []

        def resolver(target):
            seen.append(target)
            return "http://example.com/users/7"

        target = {"route": "user", "id": "7"}
        RedirectInterceptor(resolver).intercept(API, target, 301)

        assert seen == [target]
