"""Data models for dashboard feeds."""

from dataclasses import dataclass
from datetime import UTC, datetime

# Items without a usable timestamp sort after everything else.
EARLIEST = datetime.min.replace(tzinfo=UTC)


@dataclass(frozen=True)
class FeedItem:
    """Represents a single entry from an RSS or Atom feed."""

    source_name: str
    title: str
    link: str | None
    published_at: datetime = EARLIEST


@dataclass(frozen=True)
class FeedFetched:
    """A feed that was downloaded and parsed successfully."""

    url: str
    source_name: str
    items: tuple[FeedItem, ...] = ()

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class FeedFailed:
    """A feed that could not be downloaded or parsed."""

    url: str
    reason: str

    @property
    def ok(self) -> bool:
        return False


FetchResult = FeedFetched | FeedFailed
