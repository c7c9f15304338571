"""
Unit tests for middleware.
"""

import json
import logging

import pytest

from httpapi import ApiConfig
from httpapi.http import HTTPResponse
from httpapi.middleware import LoggingMiddleware, Middleware, MiddlewarePipeline

from conftest import make_request


class Recorder(Middleware):
    """Middleware that records the order it runs in."""

    def __init__(self, label, calls):
        self.label = label
        self.calls = calls

    def __call__(self, request, next):
        self.calls.append(f"{self.label}:before")
        response = next(request)
        self.calls.append(f"{self.label}:after")
        return response


class ShortCircuit(Middleware):
    def __call__(self, request, next):
        return HTTPResponse(status=403)


class TestMiddlewarePipeline:
    """Tests for MiddlewarePipeline."""

    def test_order(self):
        """Test that the first added middleware is outermost."""
        calls = []
        pipeline = MiddlewarePipeline()
        pipeline.add(Recorder("a", calls)).add(Recorder("b", calls))

        def handler(request):
            calls.append("handler")
            return HTTPResponse()

        pipeline.wrap(handler)(make_request())

        assert calls == ["a:before", "b:before", "handler", "b:after", "a:after"]
        assert pipeline.names == ["Recorder", "Recorder"]

    def test_empty_pipeline(self):
        """Test that an empty pipeline returns the handler unchanged."""
        def handler(request):
            return HTTPResponse()

        assert MiddlewarePipeline().wrap(handler) is handler

    def test_short_circuit(self):
        """Test a middleware that never calls next."""
        pipeline = MiddlewarePipeline().add(ShortCircuit())

        def handler(request):
            raise AssertionError("handler must not run")

        assert pipeline.wrap(handler)(make_request()).status == 403


class TestLoggingMiddleware:
    """Tests for LoggingMiddleware."""

    def test_text_log_marks_api_requests(self, dispatcher, caplog):
        """Test the api flag in the text access log."""
        dispatcher.use(LoggingMiddleware())

        with caplog.at_level(logging.INFO, logger="httpapi.access"):
            response = dispatcher.handle(make_request("/users/7.json"))

        assert "X-Request-ID" in response.headers
        record = [r for r in caplog.records if r.name == "httpapi.access"][-1]
        assert '"GET /users/7.json" 200' in record.getMessage()
        assert record.getMessage().endswith(" api")

    def test_json_log(self, dispatcher, caplog):
        """Test the JSON access log for a browser request."""
        dispatcher.use(LoggingMiddleware.from_config(ApiConfig(log_format="json")))

        with caplog.at_level(logging.INFO, logger="httpapi.access"):
            dispatcher.handle(make_request("/users/7"))

        record = [r for r in caplog.records if r.name == "httpapi.access"][-1]
        entry = json.loads(record.getMessage())
        assert entry["status_code"] == 200
        assert entry["api"] is False

    def test_skip_paths(self, dispatcher, caplog):
        """Test that skipped paths are not logged."""
        dispatcher.use(LoggingMiddleware(skip_paths=["/users/7"], include_request_id=False))

        with caplog.at_level(logging.INFO, logger="httpapi.access"):
            response = dispatcher.handle(make_request("/users/7"))

        assert not [r for r in caplog.records if r.name == "httpapi.access"]
        assert "X-Request-ID" not in response.headers

    def test_errors_are_logged_and_raised(self, caplog):
        """Test that handler exceptions propagate."""
        middleware = LoggingMiddleware()

        def handler(request):
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="httpapi.access"):
            with pytest.raises(RuntimeError):
                middleware(make_request(), handler)

        assert "RuntimeError: boom" in caplog.text
