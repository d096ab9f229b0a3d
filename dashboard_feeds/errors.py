"""Exceptions raised by dashboard feeds."""


class FeedError(Exception):
    """Base class for errors that affect a single feed URL."""


class FetchError(FeedError):
    """Raised when a feed URL cannot be downloaded."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch feed {url}: {reason}")
        self.url = url
        self.reason = reason


class ParseError(FeedError):
    """Raised when a downloaded document cannot be turned into feed items."""


class MalformedFeedError(ParseError):
    """The document is not well-formed XML, or is structurally broken."""


class UnknownFormatError(ParseError):
    """The document root is neither RSS nor Atom."""


class ConfigurationError(Exception):
    """Base class for configuration problems. These abort the run."""

    help = ""

    def __init__(self, message: str, help: str | None = None):
        super().__init__(message)
        if help is not None:
            self.help = help


class ConfigNotFoundError(ConfigurationError):
    help = "Create the file, or point DASHBOARD_FEEDS_CONFIG or --config at one."


class ConfigReadError(ConfigurationError):
    pass


class ConfigParseError(ConfigurationError):
    help = "The feeds file must be a JSON object."


class MissingFeedsError(ConfigurationError):
    help = """Add feeds like this:

    {"feeds": [{"url": "https://blog.rust-lang.org/feed.xml"}]}"""


class InvalidFeedUrlError(ConfigurationError):
    help = """Feed entries should look like this:

    {"url": "https://blog.rust-lang.org/feed.xml", "enabled": true}"""
