"""Custom exceptions for the local web search MCP server."""


class LocalWebSearchError(Exception):
    """Base exception for local web search errors."""

    pass


class LaunchError(LocalWebSearchError):
    """Raised when the browser process cannot be started."""

    pass


class SearchError(LocalWebSearchError):
    """Raised when the search results page cannot be loaded or read."""

    pass


class NavigationError(LocalWebSearchError):
    """Raised when a navigation yields no usable response."""

    pass


class PageTimeoutError(LocalWebSearchError, TimeoutError):
    """Raised when a navigation or in-page evaluation exceeds its wait budget."""

    pass


class EvaluationError(LocalWebSearchError):
    """Raised when an in-page script throws or returns malformed data."""

    pass
