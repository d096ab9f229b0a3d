"""Command-line entry point for dashboard feeds."""

import argparse
import sys
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TextIO

from .config import APP_NAME, VERSION, Config
from .errors import ConfigurationError
from .fetcher import FeedFetcher, collect
from .logging_config import create_execution_logger, setup_structured_logging
from .merge import merge
from .models import FeedItem
from .render import render
from .terminal import supports_color, supports_hyperlinks, terminal_width


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Show the most recent entries of your RSS and Atom feeds.",
    )
    parser.add_argument(
        "-n",
        "--limit",
        type=_non_negative_int,
        help="How many entries to return (default: config file, else 20)",
    )
    parser.add_argument(
        "-w",
        "--width",
        type=_positive_int,
        help="Wrap lines to this many columns (default: terminal width)",
    )
    parser.add_argument("-c", "--config", help="Path to the feeds file")
    parser.add_argument(
        "--hyperlinks",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Force clickable links on or off (default: detect)",
    )
    parser.add_argument(
        "--no-color", action="store_true", help="Do not dim feed names"
    )
    parser.add_argument(
        "--timeout", type=_positive_float, help="HTTP timeout in seconds"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging level for messages on standard error",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def write_items(
    items: Sequence[FeedItem],
    out: TextIO,
    width: int,
    hyperlinks: bool,
    dim_source: bool = False,
) -> int:
    """Render items to out, one or more lines each.

    Returns:
        Number of physical lines written
    """
    written = 0
    for item in items:
        for line in render(item, width, hyperlinks, dim_source=dim_source):
            out.write(line + "\n")
            written += 1
    return written


def main(argv: Sequence[str] | None = None) -> int:
    """Fetch, merge and print feed entries.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    try:
        config = Config(args.config)
    except ConfigurationError as e:
        _report_config_error(e)
        return 1

    setup_structured_logging(args.log_level or config.log_level)

    execution_id = f"run_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    main_logger = create_execution_logger("main", execution_id)
    main_logger.log_execution_start(config_path=str(config.config_path))

    try:
        urls = config.get_feed_urls()
        limit = args.limit if args.limit is not None else config.get_limit()
    except ConfigurationError as e:
        main_logger.error(str(e))
        _report_config_error(e)
        return 1

    out = sys.stdout
    width = args.width or terminal_width()
    hyperlinks = (
        args.hyperlinks if args.hyperlinks is not None else supports_hyperlinks(out)
    )
    dim_source = not args.no_color and supports_color(out)

    fetcher = FeedFetcher(
        timeout=args.timeout or config.timeout, execution_id=execution_id
    )
    try:
        results = collect(
            urls, fetcher, max_workers=config.max_workers, execution_id=execution_id
        )
    except KeyboardInterrupt:
        main_logger.log_execution_end(success=False, error="interrupted")
        return 130
    finally:
        fetcher.close()

    items = merge(results, limit)
    write_items(items, out, width, hyperlinks, dim_source)
    out.flush()

    metrics = {
        "feeds_requested": len(urls),
        "feeds_failed": sum(1 for result in results if not result.ok),
        "items_shown": len(items),
    }
    main_logger.log_metrics(metrics)
    main_logger.log_execution_end(success=metrics["feeds_failed"] == 0, metrics=metrics)
    return 0


def _report_config_error(error: ConfigurationError) -> None:
    print(f"{APP_NAME}: {error}", file=sys.stderr)
    if error.help:
        print(f"\nhelp: {error.help}", file=sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
