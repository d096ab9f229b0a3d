"""Terminal line rendering for feed items."""

import re

from wcwidth import wcswidth, wcwidth

from .models import FeedItem

# OSC 8 hyperlink and SGR dim escapes; both take up no columns on screen
HYPERLINK_START = "\x1b]8;;{url}\x1b\\"
HYPERLINK_END = "\x1b]8;;\x1b\\"
DIM_START = "\x1b[2m"
DIM_END = "\x1b[22m"

ESCAPE_PATTERN = re.compile(r"\x1b\]8;;[^\x1b]*\x1b\\|\x1b\[[0-9;]*m")

DEFAULT_MARKER = "- "
DEFAULT_INDENT = "    "


def hyperlink(text: str, url: str) -> str:
    """Wrap text in an OSC 8 hyperlink pointing at url."""
    return f"{HYPERLINK_START.format(url=url)}{text}{HYPERLINK_END}"


def visible_text(line: str) -> str:
    """Return line with all hyperlink and color escapes removed."""
    return ESCAPE_PATTERN.sub("", line)


def _squash(text: str) -> str:
    return " ".join(text.split())


def item_text(item: FeedItem) -> str:
    """Build the single logical line shown for an item."""
    source = _squash(item.source_name)
    title = _squash(item.title)
    if source and title:
        return f"{source}: {title}"
    return source or title


def display_width(text: str) -> int:
    """Number of terminal columns text takes up."""
    width = wcswidth(text)
    if width < 0:
        # wcswidth gives up on control characters; count the printable rest
        width = sum(max(wcwidth(char), 0) for char in text)
    return width


def wrap_item(
    item: FeedItem,
    width: int,
    marker: str = DEFAULT_MARKER,
    indent: str = DEFAULT_INDENT,
) -> list[str]:
    """Word-wrap an item's text without any escape sequences.

    Width is measured in terminal columns, so wide CJK characters and emoji
    count twice. Lines never break inside a word; a word wider than the
    available space gets a line to itself. Marker and indent count towards
    the width.

    Returns:
        Line bodies, without marker or indent
    """
    if width <= 0:
        raise ValueError(f"width must be positive, got {width}")

    words = item_text(item).split()
    if not words:
        return [""]

    lines = [[words[0]]]
    used = display_width(marker) + display_width(words[0])
    for word in words[1:]:
        columns = display_width(word)
        if used + 1 + columns > width:
            lines.append([word])
            used = display_width(indent) + columns
        else:
            lines[-1].append(word)
            used += 1 + columns

    return [" ".join(line) for line in lines]


def _dim_prefix(bodies: list[str], length: int) -> list[str]:
    """Dim the first ``length`` characters of the text spread over bodies."""
    styled = []
    offset = 0
    for body in bodies:
        cut = min(len(body), max(0, length - offset))
        if cut:
            body = f"{DIM_START}{body[:cut]}{DIM_END}{body[cut:]}"
        styled.append(body)
        # Bodies were separated by exactly one space before wrapping
        offset += len(visible_text(body)) + 1
    return styled


def render(
    item: FeedItem,
    width: int,
    hyperlinks_enabled: bool,
    *,
    marker: str = DEFAULT_MARKER,
    indent: str = DEFAULT_INDENT,
    dim_source: bool = False,
) -> list[str]:
    """Render one feed item as physical terminal lines.

    Escape sequences are added only after wrapping, so the line breaks are
    the same whether hyperlinks or dimming are enabled or not.

    Args:
        item: Item to render
        width: Terminal width in columns
        hyperlinks_enabled: Whether the output supports OSC 8 hyperlinks
        marker: Prefix of the first line
        indent: Prefix of continuation lines
        dim_source: Whether to dim the feed name

    Returns:
        One string per physical line, without trailing newlines
    """
    bodies = wrap_item(item, width, marker, indent)

    if dim_source and item.source_name.strip():
        bodies = _dim_prefix(bodies, len(_squash(item.source_name)))

    if hyperlinks_enabled and item.link:
        bodies = [hyperlink(body, item.link) if body else body for body in bodies]

    prefixes = [marker] + [indent] * (len(bodies) - 1)
    return [f"{prefix}{body}".rstrip(" ") for prefix, body in zip(prefixes, bodies)]
