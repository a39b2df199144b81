"""MCP server exposing the local web search pipeline as a tool."""

import asyncio
import logging
import sys
import uuid


def _configure_stdio_logging() -> None:
    """Configure logging for stdio MCP mode - all logs MUST go to stderr.

    In stdio mode, stdout is reserved exclusively for JSON-RPC messages.
    Any logging or print() to stdout corrupts the protocol stream.
    """
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    root = logging.getLogger()
    root.handlers = [stderr_handler]
    root.setLevel(logging.WARNING)

    # Suppress verbose loggers from dependencies
    for logger_name in ["asyncio", "playwright", "readability", "readability.readability", "httpx", "httpcore"]:
        dep_logger = logging.getLogger(logger_name)
        dep_logger.setLevel(logging.WARNING)
        dep_logger.handlers = [stderr_handler]
        dep_logger.propagate = False


# Configure logging BEFORE the server and its dependencies start emitting records
_configure_stdio_logging()

# ruff: noqa: E402 - Intentional late imports after logging configuration
from fastmcp import FastMCP
from fastmcp.dependencies import CurrentContext
from fastmcp.exceptions import ToolError
from fastmcp.server.context import Context
from pydantic import ValidationError

from .config import settings
from .exceptions import LaunchError, LocalWebSearchError
from .models import SearchRequest, format_results
from .observability import bind_search_context, clear_search_context, get_search_logger, setup_structured_logging
from .pipeline import Launcher, SearchPipeline
from .utils import save_search_results

# Apply configured log level (may override the default WARNING)
logger = logging.getLogger("mcp_server_local_web_search")
logger.setLevel(getattr(logging, settings.server.logging_level.upper()))


def serve(launcher: Launcher | None = None) -> FastMCP:
    """Create and configure the MCP server.

    Args:
        launcher: Optional browser launcher override (defaults to Playwright).
    """
    setup_structured_logging(settings.server.logging_level)

    server = FastMCP("mcp_server_local_web_search")

    @server.tool()
    async def local_web_search(
        query: str,
        excludeDomains: list[str] | None = None,  # noqa: N803 - tool argument names are part of the wire contract
        limit: int | None = None,
        truncate: int | None = None,
        proxy: str | None = None,
        show: bool = False,
        ctx: Context = CurrentContext(),
    ) -> str:
        """
        Search the web with a local headless browser and return readable page content.

        Visits each result link and extracts its main article as markdown.
        Links that fail to load are still listed, without content.

        Args:
            query: Search query to find relevant content
            excludeDomains: Domains to exclude from search results
            limit: Maximum number of results to return (default from settings)
            truncate: Maximum number of characters of content per result
            proxy: Proxy server to use for this search (overrides settings)
            show: Show the browser window for debugging

        Returns:
            JSON object {"results": [{title, url, content?, description?}, ...]}
        """
        try:
            request = SearchRequest(
                query=query,
                exclude_domains=excludeDomains or [],
                limit=limit if limit is not None else settings.search.default_limit,
                truncate=truncate,
                provider=settings.search.provider,
            )
        except ValidationError as e:
            messages = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
            raise ToolError(f"Invalid arguments for local_web_search: {messages}") from e

        browser_settings = settings.browser.model_copy(
            update={
                "headless": settings.browser.headless and not show,
                "proxy_server": proxy or settings.browser.proxy_server,
            }
        )
        pipeline_kwargs = {"launcher": launcher} if launcher else {}
        pipeline = SearchPipeline(settings.search, browser_settings, **pipeline_kwargs)

        search_id = str(uuid.uuid4())
        bind_search_context(search_id, request.query)
        search_logger = get_search_logger()
        search_logger.info("search_started", limit=request.limit, excluded=sorted(request.exclude_domains))
        await ctx.info(f"Searching: {request.query}")

        try:
            if settings.search.timeout:
                results = await asyncio.wait_for(pipeline.run(request), timeout=settings.search.timeout)
            else:
                results = await pipeline.run(request)
        except LaunchError as e:
            search_logger.error("browser_launch_failed", error=str(e))
            raise ToolError(f"Browser launch failed: {e}") from e
        except LocalWebSearchError as e:
            search_logger.error("search_failed", error=str(e))
            raise ToolError(f"Search failed: {e}") from e
        except asyncio.TimeoutError as e:
            search_logger.error("search_timeout", timeout=settings.search.timeout)
            raise ToolError(f"Search timed out after {settings.search.timeout}s") from e
        except Exception as e:
            logger.exception(f"Unexpected search failure: {e}")
            raise ToolError(f"Search failed: {e}") from e
        finally:
            clear_search_context()

        payload = format_results(results)
        if settings.server.results_dir:
            try:
                saved_path = save_search_results(
                    payload,
                    settings.get_results_dir(),
                    prefix=f"search_{request.query[:20]}",
                    metadata={"query": request.query, "limit": request.limit, "exclude_domains": sorted(request.exclude_domains)},
                )
                await ctx.info(f"Saved to: {saved_path.name}")
            except OSError as e:
                # The search itself succeeded; persistence is best effort
                logger.warning(f"Failed to save search results to {settings.server.results_dir}: {e}")

        await ctx.info(f"Found {len(results)} results")
        return payload

    return server


server_instance = serve()


def main() -> None:
    """Entry point for MCP server."""
    transport = settings.server.transport

    if transport == "stdio":
        server_instance.run(transport="stdio")
    elif transport in ("streamable-http", "sse"):
        logger.info(f"Starting local web search server (transport: {transport})")
        logger.info(f"HTTP server at http://{settings.server.host}:{settings.server.port}/mcp")
        server_instance.run(transport=transport, host=settings.server.host, port=settings.server.port)
    else:
        raise ValueError(f"Unknown transport: {transport}")


if __name__ == "__main__":
    main()
