"""RSS and Atom parsing for dashboard feeds."""

import io
import xml.sax
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

import feedparser
from bs4 import BeautifulSoup
from dateutil import parser as date_parser
from feedparser.exceptions import CharacterEncodingOverride, CharacterEncodingUnknown

from .errors import MalformedFeedError, UnknownFormatError
from .models import EARLIEST, FeedItem

ENCODING_ERRORS = (CharacterEncodingOverride, CharacterEncodingUnknown)


@dataclass(frozen=True)
class RssItem:
    title: str
    link: str | None
    pub_date: datetime


@dataclass(frozen=True)
class RssParsed:
    """Result of reading an RSS document."""

    channel_title: str
    items: tuple[RssItem, ...]

    @property
    def source_name(self) -> str:
        return self.channel_title


@dataclass(frozen=True)
class AtomEntry:
    title: str
    link: str | None
    updated: datetime


@dataclass(frozen=True)
class AtomParsed:
    """Result of reading an Atom document."""

    feed_title: str
    entries: tuple[AtomEntry, ...]

    @property
    def source_name(self) -> str:
        return self.feed_title


ParseOutcome = RssParsed | AtomParsed


def load_document(data: bytes | str) -> feedparser.FeedParserDict:
    """Parse raw feed bytes with feedparser.

    feedparser salvages broken documents with its loose parser and flags
    them as bozo. A bozo document whose XML or character encoding is broken
    is rejected here instead of being salvaged.

    Args:
        data: Raw document as downloaded

    Returns:
        feedparser result, with ``version`` set to the detected format

    Raises:
        MalformedFeedError: If the document is empty or not well-formed XML
    """
    if not data or not data.strip():
        raise MalformedFeedError("Document is empty")

    if isinstance(data, str):
        data = data.encode("utf-8")

    # A file object keeps feedparser from treating the bytes as a URL or path
    parsed = feedparser.parse(io.BytesIO(data))

    if parsed.bozo:
        error = parsed.get("bozo_exception")
        if isinstance(error, xml.sax.SAXException):
            raise MalformedFeedError(f"Invalid XML: {error}")
        if isinstance(error, ENCODING_ERRORS):
            raise MalformedFeedError(f"Invalid character encoding: {error}")

    return parsed


def _detected(version: str) -> str:
    return f"detected {version}" if version else "no feed elements found"


def clean_title(text: str | None, html: bool = True) -> str:
    """Strip HTML markup from a title and collapse whitespace.

    Args:
        text: Raw title text
        html: Whether the text may carry HTML markup or entities

    Returns:
        Single-line plain text title
    """
    if not text:
        return ""

    if html and ("<" in text or ">" in text or "&" in text):
        soup = BeautifulSoup(text, "html.parser")
        for script in soup(["script", "style"]):
            script.decompose()
        text = soup.get_text(separator=" ")

    return " ".join(text.split())


def parse_date(text: str | None, iso: bool = False) -> datetime:
    """Parse a feed timestamp, falling back to EARLIEST.

    RSS dates are RFC 2822 text, with ISO 8601 accepted as well. Atom dates
    (``iso=True``) are ISO 8601 only. Text that is not a complete date, such
    as a bare weekday or time of day, counts as missing. Naive timestamps are
    taken as UTC so every item is comparable.
    """
    if not text or not text.strip():
        return EARLIEST

    text = text.strip()
    published = None
    if not iso:
        try:
            published = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            published = None

    if published is None:
        try:
            published = date_parser.isoparse(text)
        except (ValueError, OverflowError):
            return EARLIEST

    if published.tzinfo is None:
        published = published.replace(tzinfo=UTC)
    return published


def _title(detail) -> str:
    """Extract display text from a feedparser ``*_detail`` text construct."""
    if not detail:
        return ""
    return clean_title(detail.get("value"), html=detail.get("type") != "text/plain")


def _first(entry, *keys) -> str | None:
    for key in keys:
        if key in entry and entry[key]:
            return entry[key]
    return None


def read_rss(data: bytes | str) -> RssParsed:
    """Read an RSS document (RSS 2.0, and the 0.9x and 1.0 dialects).

    Raises:
        MalformedFeedError: If the document is not well-formed
        UnknownFormatError: If the document is not RSS
    """
    parsed = load_document(data)

    version = parsed.get("version", "")
    if not version.startswith("rss"):
        raise UnknownFormatError(f"Document is not RSS ({_detected(version)})")

    items = []
    for entry in parsed.entries:
        link = (entry.get("link") or "").strip()
        items.append(
            RssItem(
                title=_title(entry.get("title_detail")),
                link=link or None,
                pub_date=parse_date(_first(entry, "published", "updated")),
            )
        )

    return RssParsed(
        channel_title=_title(parsed.feed.get("title_detail")),
        items=tuple(items),
    )


def _atom_link(entry) -> str | None:
    """Pick the alternate link of an entry, else its first link."""
    links = [link for link in entry.get("links", []) if link.get("href")]
    for link in links:
        # feedparser fills in rel="alternate" for links without rel
        if link.get("rel") == "alternate":
            return link["href"].strip()
    if links:
        return links[0]["href"].strip()
    return None


def read_atom(data: bytes | str) -> AtomParsed:
    """Read an Atom document.

    Raises:
        MalformedFeedError: If the document is not well-formed
        UnknownFormatError: If the document is not an Atom feed
    """
    parsed = load_document(data)

    version = parsed.get("version", "")
    if not version.startswith("atom"):
        raise UnknownFormatError(f"Document is not Atom ({_detected(version)})")

    entries = []
    for entry in parsed.entries:
        entries.append(
            AtomEntry(
                title=_title(entry.get("title_detail")),
                link=_atom_link(entry),
                updated=parse_date(_first(entry, "updated", "published"), iso=True),
            )
        )

    return AtomParsed(
        feed_title=_title(parsed.feed.get("title_detail")),
        entries=tuple(entries),
    )


def to_feed_items(outcome: ParseOutcome) -> list[FeedItem]:
    """Convert a format-specific parse outcome into FeedItem objects."""
    if isinstance(outcome, RssParsed):
        return [
            FeedItem(
                source_name=outcome.channel_title,
                title=item.title,
                link=item.link,
                published_at=item.pub_date,
            )
            for item in outcome.items
        ]

    return [
        FeedItem(
            source_name=outcome.feed_title,
            title=entry.title,
            link=entry.link,
            published_at=entry.updated,
        )
        for entry in outcome.entries
    ]


def parse_rss(data: bytes | str) -> list[FeedItem]:
    """Parse an RSS document into feed items."""
    return to_feed_items(read_rss(data))


def parse_atom(data: bytes | str) -> list[FeedItem]:
    """Parse an Atom document into feed items."""
    return to_feed_items(read_atom(data))


def read_feed(data: bytes | str) -> ParseOutcome:
    """Read a document as RSS, falling back to Atom.

    Only an unrecognized format falls through to the next parser.
    A malformed document is reported as soon as a parser sees it.

    Raises:
        MalformedFeedError: If the document is not well-formed
        UnknownFormatError: If the document is neither RSS nor Atom
    """
    try:
        return read_rss(data)
    except UnknownFormatError:
        pass

    try:
        return read_atom(data)
    except UnknownFormatError as e:
        raise UnknownFormatError(
            f"Document is neither RSS 2.0 nor Atom 1.0 ({e})"
        ) from None


def parse_feed(data: bytes | str) -> list[FeedItem]:
    """Parse an RSS or Atom document into feed items."""
    return to_feed_items(read_feed(data))
