from datetime import timedelta

from newsdesk.models import FeedSource, RawFeedItem
from newsdesk.normalizer import PLACEHOLDER_URL, normalize_text, time_ago, to_article
from newsdesk.parser import parse_feed

from conftest import NOW, rss


def test_normalize_strips_tags_and_decodes_entities():
    assert normalize_text("A &amp; B <b>bold</b>") == "A & B bold"


def test_normalize_handles_common_entities():
    raw = "&lt;tag&gt; &quot;q&quot; it&#039;s &apos;x&apos;&nbsp;end &#169;"
    assert normalize_text(raw) == "\"q\" it's 'x' end ©"


def test_normalize_collapses_whitespace_and_trims():
    assert normalize_text("  one\n\n two\t three  ") == "one two three"


def test_normalize_keeps_literal_comparisons():
    assert normalize_text("a &lt; b and c &gt; d") == "a < b and c > d"


def test_normalize_is_total_on_malformed_input():
    assert normalize_text(None) == ""
    assert normalize_text("") == ""
    assert normalize_text("broken &#xZZ; <b unclosed") == "broken &#xZZ; <b unclosed"


def test_time_ago_buckets():
    assert time_ago(NOW - timedelta(seconds=30), NOW) == "just now"
    assert time_ago(NOW - timedelta(minutes=5), NOW) == "5m ago"
    assert time_ago(NOW - timedelta(hours=3, minutes=59), NOW) == "3h ago"
    assert time_ago(NOW - timedelta(days=2, hours=1), NOW) == "2d ago"
    assert time_ago(NOW + timedelta(minutes=10), NOW) == "just now"


def test_to_article_derives_fields():
    source = FeedSource("business", "BBC Business", "https://feeds.example/business")
    item = RawFeedItem(
        title="Bank &amp; Co",
        description_html="<p>Profits rose. Shares jumped! More later?</p>",
        published_at="Sat, 01 Mar 2025 11:00:00 GMT",
        link="https://example.com/bank",
    )
    article = to_article(item, source, NOW)

    assert article.title == "Bank & Co"
    assert article.description_plain == "Profits rose. Shares jumped! More later?"
    assert article.category_key == "business"
    assert article.source_name == "BBC Business"
    assert article.age_hours == 1.0
    assert article.is_breaking
    assert article.time_ago_label == "1h ago"
    assert article.exec_summary == "Profits rose. Shares jumped!"
    assert article.url == "https://example.com/bank"
    assert article.id == "Bank & Cobusiness"


def test_to_article_defaults_missing_date_and_link():
    source = FeedSource("sports", "BBC Sport", "https://feeds.example/sport")
    article = to_article(RawFeedItem(title="Match report"), source, NOW)

    assert article.published_at == NOW
    assert article.age_hours == 0
    assert article.is_breaking
    assert article.url == PLACEHOLDER_URL


def test_to_article_old_item_is_not_breaking():
    source = FeedSource("sports", "BBC Sport", "https://feeds.example/sport")
    item = RawFeedItem(title="Old", published_at="Sat, 01 Mar 2025 10:00:00 GMT")
    article = to_article(item, source, NOW)

    assert article.age_hours == 2.0
    assert not article.is_breaking


def test_parsed_titles_keep_comparison_operators():
    body = rss(
        "<item><title>Rates: 5 &lt; 6 and 7 &gt; 3</title>"
        "<description>Inflation &lt; 2% and growth &gt; 1%.</description></item>",
        "<item><title><![CDATA[Yields < 4% as stocks > record]]></title>"
        "<description><![CDATA[<p>Bonds <b>rallied</b> as 3 < 5.</p>]]></description></item>",
    )
    source = FeedSource("business", "BBC Business", "https://feeds.example/business")
    first, second = [to_article(item, source, NOW) for item in parse_feed(body)]

    assert first.title == "Rates: 5 < 6 and 7 > 3"
    assert first.description_plain == "Inflation < 2% and growth > 1%."
    assert second.title == "Yields < 4% as stocks > record"
    assert second.description_plain == "Bonds rallied as 3 < 5."


def test_normalize_strips_comments_and_encoded_tags():
    assert normalize_text("<!-- ad -->Lead &lt;i&gt;story&lt;/i&gt;") == "Lead story"
