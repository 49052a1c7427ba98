import logging

import pytest

from newsdesk.config import Settings, configure_logging, load_settings
from newsdesk.exceptions import ConfigurationError


def test_defaults_from_empty_env():
    settings = load_settings({})

    assert settings == Settings()
    assert settings.refresh_seconds == 900
    assert settings.fetch_timeout == 12.0
    assert settings.summary_provider == "groq"


def test_values_from_env():
    settings = load_settings({
        "NEWSDESK_PROXY_URL": "https://proxy.example/api/rss",
        "NEWSDESK_FETCH_TIMEOUT": "10",
        "NEWSDESK_REFRESH_MINUTES": "5",
        "NEWSDESK_AUTOSTART": "false",
        "NEWSDESK_SUMMARY_PROVIDER": "OpenAI",
    })

    assert settings.proxy_url == "https://proxy.example/api/rss"
    assert settings.fetch_timeout == 10.0
    assert settings.refresh_seconds == 300
    assert settings.autostart is False
    assert settings.summary_provider == "openai"


@pytest.mark.parametrize("value", ["soon", "0", "-3"])
def test_invalid_numbers_are_rejected(value):
    with pytest.raises(ConfigurationError):
        load_settings({"NEWSDESK_FETCH_TIMEOUT": value})


def test_configure_logging_is_idempotent():
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    try:
        root.handlers = []
        configure_logging("DEBUG")
        configure_logging("DEBUG")
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
    finally:
        root.handlers = original_handlers
        root.setLevel(original_level)
