"""Search-and-extraction pipeline.

One run owns one browser session: the results page is rendered and its links
extracted, deduplicated and filtered in a single sequential phase, then every
surviving link is visited concurrently under a fixed worker budget. A failing
link degrades to a result without content; it never aborts the batch.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

from pydantic import ValidationError

from .browser import BrowserSession
from .config import AppSettings, BrowserSettings, SearchSettings, WaitUntil, settings as app_settings
from .content import Article, extract_article, has_text, to_markdown
from .exceptions import LocalWebSearchError, SearchError
from .filters import filter_links
from .models import CandidateLink, SearchRequest, SearchResult
from .observability import get_search_logger
from .providers import build_search_url, get_provider
from .scripts import CONTENT_CLEANUP_SCRIPT, LINK_EXTRACTION_SCRIPT, NOISE_SELECTORS

logger = logging.getLogger(__name__)


class PageEvaluator(Protocol):
    """The part of :class:`BrowserSession` the pipeline depends on."""

    async def evaluate_on_page(self, url: str, script: str, arg: Any = None, wait_until: WaitUntil | None = None) -> Any: ...

    async def close(self) -> None: ...


Launcher = Callable[[BrowserSettings], Awaitable[PageEvaluator]]
ArticleExtractor = Callable[[str, str], Article]
MarkdownConverter = Callable[[str], str]


def parse_links(raw: Any) -> list[CandidateLink]:
    """Validate the link extractor's output, dropping malformed entries."""
    if not isinstance(raw, list):
        raise SearchError(f"Link extraction returned {type(raw).__name__}, expected a list")

    links: list[CandidateLink] = []
    for item in raw:
        try:
            links.append(CandidateLink.model_validate(item))
        except ValidationError as e:
            logger.debug(f"Skipping malformed link {item!r}: {e.errors()[0]['msg']}")
    return links


def truncate_content(content: str, truncate: int | None) -> str:
    """Cut to ``truncate`` characters; None means no limit."""
    if truncate is None:
        return content
    return content[:truncate]


class SearchPipeline:
    """Runs one search request end to end.

    The browser launcher and both content capabilities are injectable so
    they can be swapped or faked.
    """

    def __init__(
        self,
        search_settings: SearchSettings | None = None,
        browser_settings: BrowserSettings | None = None,
        launcher: Launcher = BrowserSession.launch,
        article_extractor: ArticleExtractor = extract_article,
        markdown_converter: MarkdownConverter = to_markdown,
    ):
        self.search_settings = search_settings or app_settings.search
        self.browser_settings = browser_settings or app_settings.browser
        self._launch = launcher
        self._extract_article = article_extractor
        self._to_markdown = markdown_converter

    async def run(self, request: SearchRequest) -> list[SearchResult]:
        """Execute the search and return results in results-page order.

        Raises:
            LaunchError: The browser could not be started.
            SearchError: The results page could not be loaded or read.
        """
        search_logger = get_search_logger()
        url = build_search_url(request)

        session = await self._launch(self.browser_settings)
        try:
            candidates = await self._collect_links(session, request, url)
            search_logger.info("links_extracted", count=len(candidates), url=url)

            visited: set[str] = set()
            links = filter_links(
                candidates,
                visited,
                skip_domains=self.search_settings.skip_domains,
                exclude_domains=request.exclude_domains,
                limit=request.limit,
            )
            if not links:
                logger.info(f"No usable links for query: {request.query[:100]}")
                return []

            results = await self.fetch_all(session, links, request.truncate)
            search_logger.info(
                "search_completed",
                results=len(results),
                with_content=sum(1 for r in results if r.content is not None),
            )
            return results
        finally:
            await session.close()

    async def _collect_links(self, session: PageEvaluator, request: SearchRequest, url: str) -> list[CandidateLink]:
        provider = get_provider(request.provider)
        logger.info(f"Loading results page: {url}")
        try:
            raw = await session.evaluate_on_page(
                url,
                LINK_EXTRACTION_SCRIPT,
                provider.extractor_options(),
                wait_until=self.search_settings.results_wait_until,
            )
        except LocalWebSearchError as e:
            raise SearchError(f"Search results page failed: {e}") from e
        return parse_links(raw)

    async def fetch_all(
        self,
        session: PageEvaluator,
        links: Sequence[CandidateLink],
        truncate: int | None = None,
    ) -> list[SearchResult]:
        """Fetch and convert every link under the concurrency limit.

        Waits for every task to settle. The output has one result per link,
        in the order of ``links``.
        """
        semaphore = asyncio.Semaphore(self.search_settings.concurrency)

        async def bounded(link: CandidateLink) -> SearchResult:
            async with semaphore:
                return await self.fetch_one(session, link, truncate)

        logger.info(f"Fetching {len(links)} links (concurrency={self.search_settings.concurrency})")
        settled = await asyncio.gather(*(bounded(link) for link in links), return_exceptions=True)

        results: list[SearchResult] = []
        for link, outcome in zip(links, settled):
            if isinstance(outcome, SearchResult):
                results.append(outcome)
            elif isinstance(outcome, Exception):
                logger.error(f"Unexpected error fetching {link.url}: {outcome!r}")
                results.append(SearchResult(title=link.title, url=link.url))
            else:
                raise outcome
        return results

    async def fetch_one(self, session: PageEvaluator, link: CandidateLink, truncate: int | None = None) -> SearchResult:
        """Visit one link and build its result, degrading on any per-link failure."""
        try:
            payload = await session.evaluate_on_page(
                link.url,
                CONTENT_CLEANUP_SCRIPT,
                NOISE_SELECTORS,
                wait_until=self.search_settings.page_wait_until,
            )
        except LocalWebSearchError as e:
            logger.warning(f"Error fetching content for {link.url}: {e}")
            return SearchResult(title=link.title, url=link.url)

        return self.build_result(link, payload, truncate)

    def build_result(self, link: CandidateLink, payload: Any, truncate: int | None = None) -> SearchResult:
        """Turn the cleaned page payload into a result."""
        degraded = SearchResult(title=link.title, url=link.url)

        if not isinstance(payload, dict) or not isinstance(payload.get("html"), str):
            logger.warning(f"Malformed page payload from {link.url}")
            return degraded
        page_title = payload.get("title") if isinstance(payload.get("title"), str) else ""

        try:
            article = self._extract_article(payload["html"], page_title)
        except Exception as e:
            logger.warning(f"Article extraction failed for {link.url}: {e}")
            return degraded

        if not has_text(article.html):
            logger.info(f"No readable content at {link.url}")
            return degraded

        markdown = self._to_markdown(article.html)
        if not markdown:
            return degraded

        content = truncate_content(markdown, truncate)
        preview_length = self.search_settings.description_length
        return SearchResult(
            title=article.title or link.title,
            url=link.url,
            content=content,
            description=content[:preview_length] or None,
        )


async def search(request: SearchRequest, config: AppSettings | None = None) -> list[SearchResult]:
    """Run a search with the given (or global) settings."""
    config = config or app_settings
    return await SearchPipeline(config.search, config.browser).run(request)
