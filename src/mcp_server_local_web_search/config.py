"""Configuration management using Pydantic settings with optional file persistence."""

import json
import os
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import ProviderName

# --- Paths ---

APP_NAME = "mcp-server-local-web-search"


def get_config_dir() -> Path:
    """Get the configuration directory (e.g. ~/.config/mcp-server-local-web-search)."""
    if os.name == "nt":
        base = Path(os.environ.get("APPDATA", Path.home() / ".config")).expanduser()
    else:
        base = Path("~/.config").expanduser()

    return base / APP_NAME


CONFIG_FILE = get_config_dir() / "config.json"


def load_config_file() -> dict[str, Any]:
    """Load settings from the JSON config file if it exists."""
    if not CONFIG_FILE.exists():
        return {}

    try:
        text = CONFIG_FILE.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        return json.loads(text)
    except (OSError, ValueError):
        return {}


def save_config_file(config_data: dict[str, Any]) -> None:
    """Save settings to the JSON config file."""
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(config_data, indent=2), encoding="utf-8")


DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"

# Video, social and pin boards rarely yield readable article text
DEFAULT_SKIP_DOMAINS = [
    "youtube.com",
    "youtu.be",
    "facebook.com",
    "instagram.com",
    "tiktok.com",
    "pinterest.com",
]

WaitUntil = Literal["load", "domcontentloaded", "networkidle"]


class BrowserSettings(BaseSettings):
    """Browser configuration."""

    model_config = SettingsConfigDict(env_prefix="MCP_BROWSER_")

    headless: bool = Field(default=True)
    proxy_server: Optional[str] = Field(default=None, description="Proxy server URL (e.g., http://host:8080)")
    proxy_bypass: Optional[str] = Field(default=None, description="Comma-separated hosts to bypass proxy")
    channel: Optional[str] = Field(default=None, description="Chromium distribution channel (e.g., chrome, msedge)")
    executable_path: Optional[str] = Field(default=None, description="Explicit browser executable path")

    locale: str = Field(default="en-US")
    timezone_id: Optional[str] = Field(default=None, description="Timezone override (e.g., Europe/Berlin)")
    latitude: Optional[float] = Field(default=None, description="Geolocation latitude, requires longitude")
    longitude: Optional[float] = Field(default=None, description="Geolocation longitude, requires latitude")
    user_agent: str = Field(default=DEFAULT_USER_AGENT)
    viewport_width: int = Field(default=1920, gt=0)
    viewport_height: int = Field(default=1080, gt=0)
    extra_headers: dict[str, str] = Field(default_factory=lambda: {"Accept-Language": "en-US,en;q=0.9"})

    navigation_timeout: int = Field(default=30_000, gt=0, description="Navigation timeout in milliseconds")
    evaluation_timeout: float = Field(default=15.0, gt=0, description="In-page script timeout in seconds")


class SearchSettings(BaseSettings):
    """Search pipeline configuration."""

    model_config = SettingsConfigDict(env_prefix="MCP_SEARCH_")

    provider: ProviderName = Field(default="google")
    default_limit: int = Field(default=10, gt=0)
    concurrency: int = Field(default=15, gt=0, description="Maximum concurrent page visits")
    skip_domains: list[str] = Field(default_factory=lambda: list(DEFAULT_SKIP_DOMAINS))
    description_length: int = Field(default=200, ge=0, description="Length of the content preview")
    results_wait_until: WaitUntil = Field(default="networkidle", description="Wait condition for the results page")
    page_wait_until: WaitUntil = Field(default="domcontentloaded", description="Wait condition for result pages")
    timeout: Optional[float] = Field(default=None, gt=0, description="Overall deadline per search in seconds")


TransportType = Literal["stdio", "streamable-http", "sse"]


class ServerSettings(BaseSettings):
    """Server configuration."""

    model_config = SettingsConfigDict(env_prefix="MCP_SERVER_")

    logging_level: str = Field(default="INFO")
    transport: TransportType = Field(default="stdio", description="MCP transport: stdio, streamable-http, or sse")
    host: str = Field(default="127.0.0.1", description="Host for HTTP transports")
    port: int = Field(default=8383, description="Port for HTTP transports")
    results_dir: Optional[str] = Field(default=None, description="Directory to save search results")


class AppSettings(BaseSettings):
    """Root application settings.

    Priority: Environment Variables > Config File > Defaults
    """

    model_config = SettingsConfigDict(env_prefix="MCP_", extra="ignore")

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    def save(self) -> Path:
        """Save current configuration to file."""
        save_config_file(self.model_dump(mode="json", exclude_none=True))
        return CONFIG_FILE

    def get_results_dir(self) -> Path | None:
        """Get the results directory, creating it if configured."""
        if not self.server.results_dir:
            return None
        path = Path(self.server.results_dir).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return path


def _load_settings() -> AppSettings:
    """Load settings with file config as base, env vars overlay."""
    file_data = load_config_file()
    # Nested groups read their own env prefixes; file values only fill what env leaves unset
    sections: dict[str, Any] = {}
    for name, cls in (("browser", BrowserSettings), ("search", SearchSettings), ("server", ServerSettings)):
        env_values = cls().model_dump(exclude_unset=True)
        sections[name] = cls(**{**file_data.get(name, {}), **env_values})
    return AppSettings(**sections)


settings = _load_settings()
