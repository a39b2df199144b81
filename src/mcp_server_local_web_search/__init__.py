"""MCP server for web search through a local headless browser."""

from .config import settings
from .exceptions import (
    EvaluationError,
    LaunchError,
    LocalWebSearchError,
    NavigationError,
    PageTimeoutError,
    SearchError,
)
from .models import CandidateLink, SearchRequest, SearchResult
from .pipeline import SearchPipeline, search

__all__ = [
    "search",
    "settings",
    "SearchPipeline",
    "SearchRequest",
    "SearchResult",
    "CandidateLink",
    "LocalWebSearchError",
    "LaunchError",
    "SearchError",
    "NavigationError",
    "PageTimeoutError",
    "EvaluationError",
]
