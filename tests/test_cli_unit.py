"""End-to-end tests for the command-line entry point."""

import json
import logging
from unittest.mock import Mock, patch

import pytest

from dashboard_feeds.cli import build_parser, main
from dashboard_feeds.errors import FetchError
from dashboard_feeds.render import HYPERLINK_END

RSS_URL = "https://archlinux.org/feeds/news/"
ATOM_URL = "https://blog.rust-lang.org/feed.xml"
SLOW_URL = "https://slow.example.com/feed.xml"

DOCUMENTS = {
    RSS_URL: b"""<rss version="2.0"><channel><title>Arch Linux</title>
<item><title>A</title><link>https://archlinux.org/a</link><pubDate>Thu, 01 May 2025 10:00:00 +0000</pubDate></item>
<item><title>B</title><link>https://archlinux.org/b</link><pubDate>Fri, 02 May 2025 10:00:00 +0000</pubDate></item>
</channel></rss>""",
    ATOM_URL: b"""<feed xmlns="http://www.w3.org/2005/Atom"><title>Rust Blog</title>
<entry><title>C</title><link href="https://blog.rust-lang.org/c"/><updated>2025-05-01T12:00:00Z</updated></entry>
</feed>""",
}


def fetch(url):
    if url not in DOCUMENTS:
        raise FetchError(url, "timed out after 10s")
    return DOCUMENTS[url]


@pytest.fixture
def feeds_file(tmp_path):
    def write(urls, **extra):
        path = tmp_path / "feeds.json"
        path.write_text(json.dumps({"feeds": [{"url": url} for url in urls], **extra}))
        return str(path)

    return write


@pytest.fixture(autouse=True)
def fake_network():
    with (
        patch("dashboard_feeds.cli.FeedFetcher") as mock_fetcher_class,
        patch("dashboard_feeds.cli.setup_structured_logging"),
    ):
        mock_fetcher_class.return_value = Mock(side_effect=fetch)
        yield mock_fetcher_class


class TestCliUnit:
    """End-to-end runs of main() against canned feeds."""

    def test_prints_newest_items(self, feeds_file, capsys):
        config = feeds_file([RSS_URL, ATOM_URL])

        code = main(["-c", config, "-n", "2", "--no-hyperlinks", "--no-color"])

        assert code == 0
        assert capsys.readouterr().out == "- Arch Linux: B\n- Rust Blog: C\n"

    def test_limit_from_config_file(self, feeds_file, capsys):
        config = feeds_file([RSS_URL, ATOM_URL], limit=1)

        main(["-c", config, "--no-hyperlinks"])

        assert capsys.readouterr().out == "- Arch Linux: B\n"

    def test_zero_limit_prints_nothing(self, feeds_file, capsys):
        main(["-c", feeds_file([RSS_URL]), "-n", "0", "--no-hyperlinks"])

        assert capsys.readouterr().out == ""

    def test_failed_feed_is_a_warning(self, feeds_file, capsys, caplog):
        config = feeds_file([RSS_URL, SLOW_URL, ATOM_URL])

        with caplog.at_level(logging.WARNING, logger="dashboard_feeds"):
            code = main(["-c", config, "--no-hyperlinks"])

        assert code == 0
        assert capsys.readouterr().out.splitlines() == [
            "- Arch Linux: B",
            "- Rust Blog: C",
            "- Arch Linux: A",
        ]
        assert any(SLOW_URL in record.getMessage() for record in caplog.records)

    def test_wraps_to_width(self, feeds_file, capsys):
        main(["-c", feeds_file([RSS_URL]), "-n", "1", "-w", "10", "--no-hyperlinks"])

        assert capsys.readouterr().out == "- Arch\n    Linux:\n    B\n"

    def test_forced_hyperlinks(self, feeds_file, capsys):
        main(["-c", feeds_file([ATOM_URL]), "--hyperlinks"])

        out = capsys.readouterr().out
        assert "https://blog.rust-lang.org/c" in out
        assert out.rstrip("\n").endswith(HYPERLINK_END)

    def test_timeout_option_reaches_fetcher(self, feeds_file, fake_network):
        main(["-c", feeds_file([RSS_URL]), "--timeout", "3", "--no-hyperlinks"])

        assert fake_network.call_args.kwargs["timeout"] == 3.0

    def test_missing_config(self, tmp_path, capsys):
        code = main(["-c", str(tmp_path / "missing.json")])

        err = capsys.readouterr().err
        assert code == 1
        assert "Config file not found" in err
        assert "help:" in err

    def test_bad_feed_entry(self, tmp_path, capsys):
        path = tmp_path / "feeds.json"
        path.write_text(json.dumps({"feeds": [{"href": RSS_URL}]}))

        assert main(["-c", str(path)]) == 1
        assert "bad entry" in capsys.readouterr().err

    @pytest.mark.parametrize("argv", [["-n", "-1"], ["-w", "0"], ["--timeout", "0"]])
    def test_invalid_arguments(self, argv):
        with pytest.raises(SystemExit) as excinfo:
            build_parser().parse_args(argv)

        assert excinfo.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--version"])

        assert excinfo.value.code == 0
        assert "dashboard-feeds 0.1.0" in capsys.readouterr().out
