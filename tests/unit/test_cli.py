"""
Unit tests for the command-line entry point.
"""

import json
import sys

import pytest

from httpapi import ApiConfig
from httpapi.__main__ import build_dispatcher, main

from conftest import make_request


def run_cli(monkeypatch, capsys, *argv):
    monkeypatch.setattr(sys, "argv", ["httpapi", *argv])
    main()
    return capsys.readouterr().out


class TestDemoApplication:
    """Tests for the demo dispatcher."""

    def test_article_json(self):
        """Test the demo view action as JSON."""
        response = build_dispatcher(ApiConfig()).handle(make_request("/articles/2.json"))

        assert json.loads(response.body)["data"]["article"]["id"] == 2

    def test_missing_article_json(self):
        """Test a NotFoundError rendered for an API client."""
        response = build_dispatcher(ApiConfig()).handle(make_request("/articles/9.json"))

        assert response.status == 404
        assert json.loads(response.body) == {
            "success": False,
            "data": {"message": "No article 9", "code": 404},
        }

    def test_old_redirects_to_named_route(self):
        """Test the route-style redirect target."""
        response = build_dispatcher(ApiConfig()).handle(make_request("/articles/old.json"))

        assert response.status == 301
        assert response.headers["Location"] == "http://example.com/articles/1"


class TestMain:
    """Tests for main()."""

    def test_json_request(self, monkeypatch, capsys):
        """Test printing a JSON response."""
        out = run_cli(monkeypatch, capsys, "GET", "/articles/1.json")

        assert out.startswith("HTTP/1.1 200 OK")
        assert '"success": true' in out

    def test_browser_request(self, monkeypatch, capsys):
        """Test printing an HTML response."""
        out = run_cli(monkeypatch, capsys, "GET", "/articles/1", "--accept", "text/html")

        assert "Content-Type: text/html; charset=utf-8" in out

    def test_version(self, monkeypatch, capsys):
        """Test --version."""
        with pytest.raises(SystemExit):
            run_cli(monkeypatch, capsys, "--version")
