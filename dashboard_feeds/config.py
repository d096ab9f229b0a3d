"""Configuration management for dashboard feeds."""

import json
import os
from pathlib import Path
from urllib.parse import urlparse

from .errors import (
    ConfigNotFoundError,
    ConfigParseError,
    ConfigReadError,
    ConfigurationError,
    InvalidFeedUrlError,
    MissingFeedsError,
)

APP_NAME = "dashboard-feeds"
VERSION = "0.1.0"

DEFAULT_LIMIT = 20
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_WORKERS = 8


def default_config_dir() -> Path:
    """Per-user configuration directory, following the XDG convention."""
    base = os.getenv("XDG_CONFIG_HOME")
    if not base:
        base = Path.home() / ".config"
    return Path(base) / APP_NAME


def _env_number(name: str, default, kind):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = kind(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


class Config:
    """Main configuration manager."""

    FEEDS_FILE = "feeds.json"

    def __init__(self, config_path: str | Path | None = None):
        """Initialize configuration from environment variables.

        Args:
            config_path: Explicit feeds file, overriding the environment
        """
        if config_path is None:
            config_path = os.getenv("DASHBOARD_FEEDS_CONFIG") or (
                default_config_dir() / self.FEEDS_FILE
            )
        self.config_path = Path(config_path).expanduser()
        self.timeout = _env_number("DASHBOARD_FEEDS_TIMEOUT", DEFAULT_TIMEOUT, float)
        self.max_workers = _env_number(
            "DASHBOARD_FEEDS_MAX_WORKERS", DEFAULT_MAX_WORKERS, int
        )
        self.log_level = os.getenv("LOG_LEVEL", "WARNING")
        self._data: dict | None = None

    def load(self) -> dict:
        """Read and cache the feeds file."""
        if self._data is not None:
            return self._data

        if not self.config_path.exists():
            raise ConfigNotFoundError(f"Config file not found at {self.config_path}")

        try:
            content = self.config_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigReadError(
                f"Could not read configuration file at {self.config_path}: {e}"
            ) from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigParseError(
                f"Could not parse configuration file at {self.config_path}: "
                f"{e.msg} (line {e.lineno}, column {e.colno})"
            ) from e

        if not isinstance(data, dict):
            raise ConfigParseError(
                f"Could not parse configuration file at {self.config_path}: "
                "top level is not an object"
            )

        self._data = data
        return data

    def get_feed_urls(self) -> list[str]:
        """Get the enabled feed URLs, in file order."""
        feeds = self.load().get("feeds")
        if not isinstance(feeds, list) or not feeds:
            raise MissingFeedsError(
                'Configuration key "feeds" is missing or doesn\'t have any entries'
            )

        urls = []
        for position, feed in enumerate(feeds, start=1):
            if isinstance(feed, str):
                feed = {"url": feed}
            if not isinstance(feed, dict) or not isinstance(feed.get("url"), str):
                raise InvalidFeedUrlError(
                    f"Configured list of feeds has a bad entry at position {position}"
                )
            if not feed.get("enabled", True):
                continue

            url = feed["url"].strip()
            if urlparse(url).scheme not in ("http", "https") or not urlparse(url).netloc:
                raise InvalidFeedUrlError(
                    f"Configured feed {url!r} at position {position} is not an HTTP(S) URL"
                )
            urls.append(url)

        if not urls:
            raise MissingFeedsError("No enabled feeds found in the configuration file")

        return urls

    def get_limit(self) -> int:
        """Get the number of items to show."""
        limit = self.load().get("limit", DEFAULT_LIMIT)
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise ConfigurationError(
                f'Configuration key "limit" must be a non-negative integer, got {limit!r}'
            )
        return limit
