"""Tests for configuration defaults and environment overrides."""

import os

import pytest

from mcp_server_local_web_search.config import DEFAULT_SKIP_DOMAINS, AppSettings, BrowserSettings, SearchSettings, ServerSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove MCP_* variables that would override defaults."""
    for var in list(os.environ.keys()):
        if var.startswith("MCP_"):
            monkeypatch.delenv(var, raising=False)


class TestDefaults:
    def test_browser_defaults(self):
        browser = BrowserSettings()
        assert browser.headless is True
        assert browser.proxy_server is None
        assert browser.navigation_timeout == 30_000
        assert browser.viewport_width == 1920 and browser.viewport_height == 1080
        assert "Accept-Language" in browser.extra_headers

    def test_search_defaults(self):
        search = SearchSettings()
        assert search.provider == "google"
        assert search.concurrency == 15
        assert search.default_limit == 10
        assert search.skip_domains == DEFAULT_SKIP_DOMAINS
        assert search.description_length == 200
        assert search.timeout is None

    def test_server_defaults(self):
        server = ServerSettings()
        assert server.transport == "stdio"
        assert server.results_dir is None

    def test_results_dir_unset(self):
        assert AppSettings(server=ServerSettings()).get_results_dir() is None


class TestEnvironmentOverrides:
    def test_browser_env(self, monkeypatch):
        monkeypatch.setenv("MCP_BROWSER_HEADLESS", "false")
        monkeypatch.setenv("MCP_BROWSER_PROXY_SERVER", "http://proxy:8080")
        monkeypatch.setenv("MCP_BROWSER_EXTRA_HEADERS", '{"X-Test": "1"}')

        browser = BrowserSettings()
        assert browser.headless is False
        assert browser.proxy_server == "http://proxy:8080"
        assert browser.extra_headers == {"X-Test": "1"}

    def test_search_env(self, monkeypatch):
        monkeypatch.setenv("MCP_SEARCH_CONCURRENCY", "4")
        monkeypatch.setenv("MCP_SEARCH_PROVIDER", "duckduckgo")
        monkeypatch.setenv("MCP_SEARCH_SKIP_DOMAINS", '["pinterest.com"]')

        search = SearchSettings()
        assert search.concurrency == 4
        assert search.provider == "duckduckgo"
        assert search.skip_domains == ["pinterest.com"]

    def test_invalid_wait_condition(self, monkeypatch):
        monkeypatch.setenv("MCP_SEARCH_PAGE_WAIT_UNTIL", "whenever")
        with pytest.raises(ValueError):
            SearchSettings()

    def test_results_dir_created(self, monkeypatch, tmp_path):
        target = tmp_path / "results"
        monkeypatch.setenv("MCP_SERVER_RESULTS_DIR", str(target))

        path = AppSettings(server=ServerSettings()).get_results_dir()
        assert path == target
        assert target.is_dir()
