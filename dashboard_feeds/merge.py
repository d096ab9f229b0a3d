"""Merging of feed items from several sources."""

from collections.abc import Iterable

from .models import FeedItem, FetchResult


def merge(results: Iterable[FetchResult], limit: int) -> list[FeedItem]:
    """Combine items from all successful feeds, newest first.

    Items with equal timestamps keep the order they had in ``results``
    (feed order, then order within the feed).

    Args:
        results: Per-URL outcomes from the collector
        limit: Maximum number of items to return

    Returns:
        At most ``limit`` items sorted by publish time, descending

    Raises:
        ValueError: If limit is negative
    """
    if limit < 0:
        raise ValueError(f"limit must not be negative, got {limit}")

    items = [item for result in results if result.ok for item in result.items]

    # sorted() is stable, and reverse=True keeps equal keys in input order
    items = sorted(items, key=lambda item: item.published_at, reverse=True)
    return items[:limit]
