"""Pytest configuration and fixtures for local web search tests."""

import asyncio
from typing import Any

import pytest

from mcp_server_local_web_search.config import BrowserSettings, SearchSettings
from mcp_server_local_web_search.scripts import LINK_EXTRACTION_SCRIPT


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "e2e: End-to-end tests requiring a real browser and network access")


@pytest.fixture
def anyio_backend():
    return "asyncio"


FILLER = (
    "Search results lead to pages that are rendered, cleaned and reduced to their main article. "
    "The article is converted to markdown so that it can be read as plain text by the caller. "
    "Pages that fail to load are still listed, only without any extracted content."
)


def article_html(text: str, title: str = "Article") -> str:
    """A minimal page whose main content is ``text``."""
    return f"<html><head><title>{title}</title></head><body><article><p>{text}</p></article></body></html>"


class FakeSession:
    """Stands in for BrowserSession, serving canned results per URL.

    ``pages`` maps a link URL to either a payload dict (returned as the
    cleanup script's result) or an exception instance (raised).
    """

    def __init__(self, links: Any = None, pages: dict[str, Any] | None = None, search_error: Exception | None = None, delay: float = 0.0):
        self.links = links if links is not None else []
        self.pages = pages or {}
        self.search_error = search_error
        self.delay = delay
        self.close_calls = 0
        self.visited: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def evaluate_on_page(self, url: str, script: str, arg: Any = None, wait_until: Any = None) -> Any:
        if script == LINK_EXTRACTION_SCRIPT:
            if self.search_error:
                raise self.search_error
            return self.links

        self.visited.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            page = self.pages.get(url)
            if isinstance(page, BaseException):
                raise page
            if page is None:
                return {"html": article_html(f"Content of {url}. {FILLER}"), "title": "Untitled"}
            return page
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.close_calls += 1


class FakeLauncher:
    """Records launches and hands out a prepared FakeSession."""

    def __init__(self, session: FakeSession | None = None, error: Exception | None = None):
        self.session = session or FakeSession()
        self.error = error
        self.calls: list[BrowserSettings] = []

    async def __call__(self, config: BrowserSettings) -> FakeSession:
        self.calls.append(config)
        if self.error:
            raise self.error
        return self.session


@pytest.fixture
def search_settings() -> SearchSettings:
    return SearchSettings(concurrency=15, skip_domains=["youtube.com"], description_length=200)


@pytest.fixture
def browser_settings() -> BrowserSettings:
    return BrowserSettings(headless=True)
