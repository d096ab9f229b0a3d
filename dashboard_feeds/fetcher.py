"""Concurrent feed retrieval for dashboard feeds."""

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from urllib.parse import urlparse

import requests

from .config import VERSION
from .errors import FeedError, FetchError
from .logging_config import create_execution_logger
from .models import FeedFailed, FeedFetched, FetchResult
from .parsers import read_feed, to_feed_items

USER_AGENT = f"dashboard-feeds/{VERSION}"

Fetch = Callable[[str], bytes]


class FeedFetcher:
    """Downloads raw feed documents over HTTP."""

    def __init__(
        self,
        timeout: float = 10,
        user_agent: str = USER_AGENT,
        execution_id: str | None = None,
    ):
        """Initialize FeedFetcher with configuration.

        Args:
            timeout: HTTP request timeout in seconds
            user_agent: Value of the User-Agent header
            execution_id: Execution ID for logging context
        """
        self.timeout = timeout
        self.logger = create_execution_logger("feed_fetcher", execution_id)
        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": user_agent,
                "Accept": "application/rss+xml, application/atom+xml, "
                "application/xml;q=0.9, text/xml;q=0.9, */*;q=0.8",
            }
        )

        self.logger.debug("FeedFetcher initialized", timeout=timeout)

    def __call__(self, url: str) -> bytes:
        return self.fetch(url)

    def fetch(self, url: str) -> bytes:
        """Download a single feed document.

        Args:
            url: URL of the RSS/Atom feed

        Returns:
            Raw response body

        Raises:
            FetchError: If the URL is unusable or the download fails
        """
        scheme = urlparse(url).scheme
        if scheme not in ("http", "https"):
            raise FetchError(url, f"unsupported URL scheme {scheme!r}")

        self.logger.debug("Downloading feed content", feed_url=url)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as e:
            raise FetchError(url, f"timed out after {self.timeout}s") from e
        except requests.HTTPError as e:
            raise FetchError(
                url, f"HTTP {e.response.status_code} {e.response.reason or ''}".strip()
            ) from e
        except requests.RequestException as e:
            raise FetchError(url, str(e) or type(e).__name__) from e

        self.logger.debug(
            "Feed downloaded successfully",
            feed_url=url,
            status_code=response.status_code,
            content_length=len(response.content),
        )
        return response.content

    def close(self) -> None:
        self.session.close()


def fetch_one(url: str, fetch: Fetch) -> FetchResult:
    """Fetch and parse one feed, turning feed errors into a failure record."""
    try:
        outcome = read_feed(fetch(url))
    except FetchError as e:
        return FeedFailed(url=url, reason=e.reason)
    except FeedError as e:
        return FeedFailed(url=url, reason=str(e))

    return FeedFetched(
        url=url,
        source_name=outcome.source_name,
        items=tuple(to_feed_items(outcome)),
    )


def collect(
    urls: Sequence[str],
    fetch: Fetch,
    max_workers: int = 8,
    execution_id: str | None = None,
) -> list[FetchResult]:
    """Fetch and parse every feed concurrently.

    A failing URL yields a FeedFailed record and never affects the others.
    Results come back in the order of ``urls``, whatever order the downloads
    finish in.

    Args:
        urls: Feed URLs to retrieve
        fetch: Callable returning the raw document for a URL
        max_workers: Upper bound on concurrent downloads
        execution_id: Execution ID for logging context

    Returns:
        One FetchResult per URL
    """
    logger = create_execution_logger("collector", execution_id)
    if not urls:
        return []

    logger.log_execution_start(feed_count=len(urls))

    pool = ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(urls))))
    try:
        futures = [pool.submit(fetch_one, url, fetch) for url in urls]
        results = [future.result() for future in futures]
    except KeyboardInterrupt:
        # Abandon queued and in-flight downloads instead of waiting them out
        logger.warning("Interrupted, abandoning pending feeds")
        pool.shutdown(wait=False, cancel_futures=True)
        raise
    pool.shutdown()

    for result in results:
        if result.ok:
            logger.log_feed_processing(result.url, len(result.items))
        else:
            logger.warning(
                f"Skipping feed {result.url}: {result.reason}",
                feed_url=result.url,
                reason=result.reason,
            )

    failed = sum(1 for result in results if not result.ok)
    logger.log_execution_end(
        success=failed == 0,
        feeds_failed=failed,
        total_items=sum(len(result.items) for result in results if result.ok),
    )
    return results
