from datetime import datetime, timezone

import pytest

from newsdesk.exceptions import SourceParseError
from newsdesk.parser import parse_feed, parse_published

from conftest import rss, rss_item


def test_parse_published_rfc822():
    assert parse_published("Sat, 01 Mar 2025 11:00:00 GMT") == datetime(2025, 3, 1, 11, 0, tzinfo=timezone.utc)


def test_parse_published_with_offset_is_converted_to_utc():
    assert parse_published("Sat, 01 Mar 2025 14:00:00 +0300") == datetime(2025, 3, 1, 11, 0, tzinfo=timezone.utc)


def test_parse_published_iso8601():
    assert parse_published("2025-03-01T11:00:00Z") == datetime(2025, 3, 1, 11, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [None, "", "   ", "not a date"])
def test_parse_published_absent_or_garbage(value):
    assert parse_published(value) is None


def test_parse_feed_extracts_item_fields():
    body = rss(
        rss_item("Bank Reports Record Profit", "<p>Profits <b>soared</b>.</p>", link="https://example.com/bank"),
        rss_item("Second", "", hours_ago=None, link=""),
    )
    items = parse_feed(body, "https://feeds.example/business")

    assert len(items) == 2
    first, second = items
    assert first.title == "Bank Reports Record Profit"
    assert "soared" in first.description_html
    assert first.published_at
    assert first.link == "https://example.com/bank"
    assert second.description_html == ""
    assert second.published_at == ""


def test_parse_feed_empty_channel_is_not_an_error():
    assert parse_feed(rss(), "https://feeds.example/empty") == []


@pytest.mark.parametrize("body", [b'{"error": "upstream down"}', b"", b"<html><body>Not a feed</body></html>"])
def test_parse_feed_rejects_non_feed_bodies(body):
    with pytest.raises(SourceParseError):
        parse_feed(body, "https://feeds.example/broken")


def test_parse_feed_rejects_truncated_body_even_with_salvageable_items():
    body = rss(rss_item("One", "First."), rss_item("Two", "Second."))
    truncated = body[: body.index(b"<title>Two") + len(b"<title>Tw")]

    with pytest.raises(SourceParseError):
        parse_feed(truncated, "https://feeds.example/truncated")
