"""CLI interface for the local web search MCP server."""

import asyncio
from typing import Optional

import typer
from pydantic import ValidationError

from .config import CONFIG_FILE, settings
from .exceptions import LocalWebSearchError
from .models import SearchRequest, format_results
from .observability import setup_structured_logging

app = typer.Typer(help="Web search through a local headless browser")


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    limit: int = typer.Option(None, "--limit", "-l", help="Maximum number of results"),
    exclude: Optional[list[str]] = typer.Option(None, "--exclude", "-x", help="Domain to exclude (repeatable)"),
    truncate: int = typer.Option(None, "--truncate", "-t", help="Maximum characters of content per result"),
    provider: str = typer.Option(None, "--provider", "-p", help="Search provider: google or duckduckgo"),
    show: bool = typer.Option(False, "--show", help="Show the browser window"),
    proxy: str = typer.Option(None, "--proxy", help="Proxy server URL"),
) -> None:
    """Run a search and print the results as JSON."""
    from .pipeline import SearchPipeline

    # stdout carries only the JSON payload; log records go to stderr
    setup_structured_logging(settings.server.logging_level)

    try:
        request = SearchRequest(
            query=query,
            exclude_domains=exclude or [],
            limit=limit if limit is not None else settings.search.default_limit,
            truncate=truncate,
            provider=provider or settings.search.provider,
        )
    except ValidationError as e:
        typer.echo(f"Invalid arguments: {e}", err=True)
        raise typer.Exit(code=2) from e

    browser_settings = settings.browser.model_copy(
        update={"headless": settings.browser.headless and not show, "proxy_server": proxy or settings.browser.proxy_server}
    )
    pipeline = SearchPipeline(settings.search, browser_settings)

    try:
        results = asyncio.run(pipeline.run(request))
    except LocalWebSearchError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    print(format_results(results))


@app.command()
def config(
    save: bool = typer.Option(False, "--save", help=f"Write the effective configuration to {CONFIG_FILE}"),
) -> None:
    """Show current configuration."""
    print(f"Provider: {settings.search.provider}")
    print(f"Default limit: {settings.search.default_limit}")
    print(f"Concurrency: {settings.search.concurrency}")
    print(f"Skip domains: {', '.join(settings.search.skip_domains) or '(none)'}")
    print(f"Headless: {settings.browser.headless}")
    print(f"Proxy: {settings.browser.proxy_server or '(none)'}")
    print(f"Locale: {settings.browser.locale}")
    print(f"Navigation timeout: {settings.browser.navigation_timeout} ms")
    print(f"Transport: {settings.server.transport}")
    if save:
        print(f"Saved to: {settings.save()}")


@app.command()
def server() -> None:
    """Run the MCP server."""
    from .server import main

    main()


if __name__ == "__main__":
    app()
