"""Terminal capability detection."""

import os
import shutil
import sys
from collections.abc import Mapping
from typing import TextIO

HYPERLINK_TERM_PROGRAMS = ("iTerm.app", "WezTerm", "vscode", "ghostty", "Hyper")
HYPERLINK_TERMS = ("xterm-kitty", "alacritty", "foot", "wezterm", "xterm-ghostty")


def _is_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def supports_hyperlinks(
    stream: TextIO | None = None, env: Mapping[str, str] | None = None
) -> bool:
    """Guess whether stream is a terminal that understands OSC 8 hyperlinks.

    FORCE_HYPERLINK overrides detection: "0" disables, any other value enables.
    """
    env = os.environ if env is None else env
    stream = sys.stdout if stream is None else stream

    forced = env.get("FORCE_HYPERLINK")
    if forced is not None:
        return forced != "0"

    if env.get("CI") or not _is_tty(stream):
        return False

    if env.get("WT_SESSION") or env.get("KONSOLE_VERSION") or env.get("DOMTERM"):
        return True

    if env.get("TERM_PROGRAM") in HYPERLINK_TERM_PROGRAMS:
        return True

    vte_version = env.get("VTE_VERSION", "")
    if vte_version.isdigit() and int(vte_version) >= 5000:
        return True

    return env.get("TERM") in HYPERLINK_TERMS


def supports_color(
    stream: TextIO | None = None, env: Mapping[str, str] | None = None
) -> bool:
    """Whether ANSI styling should be written to stream."""
    env = os.environ if env is None else env
    stream = sys.stdout if stream is None else stream

    if "NO_COLOR" in env:
        return False
    return _is_tty(stream) and env.get("TERM") != "dumb"


def terminal_width(default: int = 80) -> int:
    """Current terminal width in columns."""
    return shutil.get_terminal_size((default, 24)).columns
