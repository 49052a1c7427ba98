from __future__ import annotations

from typing import Optional


class NewsDeskError(Exception):
    """Base class for newsdesk errors."""


class SourceFetchError(NewsDeskError):
    """Raised when a feed cannot be retrieved or the upstream answers with a non-success status."""


class SourceParseError(NewsDeskError):
    """Raised when a feed body is not well-formed RSS/Atom markup."""


class SummarizationError(NewsDeskError):
    """Raised when the language-model summarization call fails."""

    def __init__(self, message: str, *, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.detail = detail if detail is not None else message


class ConfigurationError(NewsDeskError):
    """Raised on invalid settings, an invalid registry, or missing credentials."""
