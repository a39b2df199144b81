"""Data models for search requests, candidate links and results."""

import json
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

ProviderName = Literal["google", "duckduckgo"]


def normalize_domain(domain: str) -> str:
    """Lowercase a domain and drop any scheme, path or leading ``www.``."""
    value = domain.strip().lower()
    if "//" in value:
        value = urlparse(value).hostname or ""
    value = value.split("/", 1)[0].rstrip(".")
    if value.startswith("www."):
        value = value[4:]
    return value


class SearchRequest(BaseModel):
    """A validated search request. Immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    query: str = Field(min_length=1)
    exclude_domains: frozenset[str] = Field(default_factory=frozenset)
    limit: int = Field(default=10, gt=0)
    truncate: int | None = Field(default=None, ge=0)
    provider: ProviderName = "google"

    @field_validator("query")
    @classmethod
    def _strip_query(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("query must not be empty")
        return value

    @field_validator("exclude_domains", mode="before")
    @classmethod
    def _normalize_domains(cls, value: object) -> frozenset[str]:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        domains = (normalize_domain(str(d)) for d in value)  # type: ignore[union-attr]
        return frozenset(d for d in domains if d)


class CandidateLink(BaseModel):
    """A result link read from the search results page."""

    model_config = ConfigDict(frozen=True)

    title: str
    url: str

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @field_validator("url")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"not an absolute http(s) URL: {value!r}")
        return value


class SearchResult(BaseModel):
    """One entry of the returned result list.

    ``content`` is None when the page could not be fetched or extracted;
    the link is still reported.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    content: str | None = None
    description: str | None = None


def format_results(results: list[SearchResult]) -> str:
    """Serialize results as the tool's text payload, omitting absent fields."""
    return json.dumps({"results": [r.model_dump(exclude_none=True) for r in results]}, ensure_ascii=False)
