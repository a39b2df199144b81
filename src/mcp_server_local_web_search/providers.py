"""Search providers and query URL construction."""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

from .models import ProviderName, SearchRequest


@dataclass(frozen=True)
class SearchProvider:
    """How to query a search engine and where its result links live in the page.

    The selector fields are handed to the in-page link extractor as plain data.
    """

    name: ProviderName
    base_url: str
    origin: str
    block_selector: str
    anchor_selector: str
    title_selector: str
    count_param: str | None = None
    mode_params: dict[str, str] = field(default_factory=dict)
    redirect_param: str | None = None
    # Resolve root-relative hrefs against ``origin``; otherwise only absolute links count
    allow_relative: bool = False

    def extractor_options(self) -> dict[str, Any]:
        """Serializable argument for the link extraction script."""
        return {
            "blockSelector": self.block_selector,
            "anchorSelector": self.anchor_selector,
            "titleSelector": self.title_selector,
            "origin": self.origin,
            "redirectParam": self.redirect_param,
            "allowRelative": self.allow_relative,
        }


GOOGLE = SearchProvider(
    name="google",
    base_url="https://www.google.com/search",
    origin="https://www.google.com",
    block_selector="#search a:has(h3)",
    anchor_selector="a[href]",
    title_selector="h3",
    count_param="num",
    mode_params={"udm": "14"},  # plain "Web" tab, no AI overview or widgets
)

DUCKDUCKGO = SearchProvider(
    name="duckduckgo",
    base_url="https://html.duckduckgo.com/html/",
    origin="https://duckduckgo.com",
    block_selector=".links_main",
    anchor_selector="a.result__a, a[href]",
    title_selector="a.result__a, a",
    redirect_param="uddg",
    allow_relative=True,
)

PROVIDERS: dict[str, SearchProvider] = {p.name: p for p in (GOOGLE, DUCKDUCKGO)}


def get_provider(name: str) -> SearchProvider:
    """Look up a provider by name."""
    try:
        return PROVIDERS[name]
    except KeyError:
        raise ValueError(f"Unknown search provider: {name}. Use one of: {', '.join(sorted(PROVIDERS))}") from None


def build_query(request: SearchRequest) -> str:
    """Prefix the query with one ``-site:`` term per excluded domain."""
    exclusions = " ".join(f"-site:{domain}" for domain in sorted(request.exclude_domains))
    return f"{exclusions} {request.query}" if exclusions else request.query


def build_search_url(request: SearchRequest) -> str:
    """Map a search request to the provider's results page URL.

    Pure and deterministic: the same request always yields the same URL.
    """
    provider = get_provider(request.provider)
    params: dict[str, str] = {"q": build_query(request)}
    if provider.count_param:
        params[provider.count_param] = str(request.limit)
    params.update(provider.mode_params)
    return f"{provider.base_url}?{urlencode(params)}"
