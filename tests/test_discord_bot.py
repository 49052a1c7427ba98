from datetime import datetime, timezone

from discord_bot import MAX_MESSAGE_CHARS, format_digest, format_status
from newsdesk.models import STATUS_ERROR, STATUS_OK, NormalizedArticle
from newsdesk.registry import default_registry
from newsdesk.scheduler import DashboardState

from conftest import NOW

REGISTRY = default_registry()


def _article(title, category="business", url="https://example.com/a", breaking=False):
    return NormalizedArticle(
        title=title, description_plain="", category_key=category, source_name="BBC Business",
        published_at=NOW, age_hours=1.0, is_breaking=breaking, time_ago_label="1h ago",
        exec_summary="", detail_summary="", url=url,
    )


def test_digest_lists_newest_items_for_category():
    state = DashboardState(articles=(
        _article("Rates held", breaking=True),
        _article("Goal", "sports"),
        _article("No link", url="#"),
    ))
    text = format_digest(state, REGISTRY, "business")

    assert text.startswith("📰 Business")
    assert "🔴 BREAKING **Rates held**" in text
    assert "Goal" not in text
    assert "<#>" not in text


def test_digest_unknown_category():
    assert format_digest(DashboardState(), REGISTRY, "weather").startswith("Unknown category")


def test_digest_empty_and_loading_states():
    assert format_digest(DashboardState(), REGISTRY) == "No articles found for this category."
    assert format_digest(DashboardState(loading=True), REGISTRY).startswith("Fetching")


def test_digest_respects_message_limit():
    state = DashboardState(articles=tuple(_article("x" * 600 + str(i)) for i in range(5)))
    assert len(format_digest(state, REGISTRY)) <= MAX_MESSAGE_CHARS


def test_status_reports_failed_sources():
    state = DashboardState(
        status={"BBC World": STATUS_OK, "Reuters World": STATUS_ERROR},
        last_sync=datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc),
    )
    assert format_status(state) == "1 sources live, last sync 09:30 UTC\nFailed: Reuters World"
    assert format_status(DashboardState()) == "No sync yet."
