"""
Model-generated article analysis for the on-demand summarization endpoint.

Providers: "groq" (OpenAI-compatible endpoint, default), "openai", "gemini".
Missing credentials raise ConfigurationError; upstream failures raise
SummarizationError so the caller can surface them per article.
"""
from __future__ import annotations

import os
from typing import Mapping, Optional, Protocol

import openai

from .config import Settings
from .exceptions import ConfigurationError, SummarizationError

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
GROQ_DEFAULT_MODEL = "llama-3.3-70b-versatile"
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"
GEMINI_DEFAULT_MODEL = "gemini-1.5-flash"
MAX_TOKENS = 500
FALLBACK_SUMMARY = "Summary unavailable."


class Summarizer(Protocol):
    def summarize(self, *, title: str, exec_summary: str) -> str:  # pragma: no cover - interface
        ...


def build_prompt(title: str, exec_summary: str) -> str:
    return (
        "You are a news analyst for an expat audience in Doha, Qatar. Based on this headline and "
        "brief summary, write a 2–3 paragraph analysis in English. Cover: what happened, why it "
        "matters for Qatar or the broader region, and wider implications. Be factual and concise. "
        "No bullet points.\n\n"
        f"Headline: {title}\n"
        f"Brief summary: {exec_summary or ''}\n\n"
        "Write the full analysis now:"
    )


class OpenAICompatibleSummarizer:
    """Chat Completions summarizer for OpenAI or any OpenAI-compatible API (Groq)."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        timeout_sec: float = 30.0,
        client: Optional[openai.OpenAI] = None,
    ) -> None:
        self._client = client or openai.OpenAI(api_key=api_key, base_url=base_url, timeout=timeout_sec)
        self._model = model

    def summarize(self, *, title: str, exec_summary: str) -> str:
        try:
            resp = self._client.chat.completions.create(
                model=self._model,
                max_tokens=MAX_TOKENS,
                messages=[{"role": "user", "content": build_prompt(title, exec_summary)}],
            )
        except openai.APIStatusError as e:
            raise SummarizationError("Upstream API error", detail=e.response.text or str(e)) from e
        except openai.APIError as e:
            raise SummarizationError("Upstream API error", detail=str(e)) from e
        content = resp.choices[0].message.content if resp and resp.choices else None
        return (content or "").strip() or FALLBACK_SUMMARY


class GeminiSummarizer:
    def __init__(self, *, api_key: str, model: str, timeout_sec: float = 30.0) -> None:
        try:
            import google.generativeai as genai  # type: ignore
        except ImportError as e:  # pragma: no cover - optional dep
            raise ConfigurationError(
                "google-generativeai package is required for Gemini summarization. "
                "Install with `pip install newsdesk[gemini]`."
            ) from e
        genai.configure(api_key=api_key)
        self._genai = genai
        self._model_name = model
        self._timeout = timeout_sec

    def summarize(self, *, title: str, exec_summary: str) -> str:
        try:
            model = self._genai.GenerativeModel(self._model_name)
            resp = model.generate_content(
                build_prompt(title, exec_summary),
                generation_config={"max_output_tokens": MAX_TOKENS},
                request_options={"timeout": self._timeout},
            )
            text = getattr(resp, "text", None)
        except Exception as e:
            raise SummarizationError("Upstream API error", detail=str(e)) from e
        return (text or "").strip() or FALLBACK_SUMMARY


def build_summarizer(settings: Settings, env: Optional[Mapping[str, str]] = None) -> Summarizer:
    """Pick the provider from settings; raises ConfigurationError when its key is missing."""
    env = os.environ if env is None else env
    provider = (settings.summary_provider or "groq").lower()
    if provider == "groq":
        key = env.get("GROQ_API_KEY")
        if not key:
            raise ConfigurationError("GROQ_API_KEY not configured")
        return OpenAICompatibleSummarizer(
            api_key=key, model=settings.summary_model or GROQ_DEFAULT_MODEL, base_url=GROQ_BASE_URL
        )
    if provider == "openai":
        key = env.get("OPENAI_API_KEY")
        if not key:
            raise ConfigurationError("OPENAI_API_KEY not configured")
        return OpenAICompatibleSummarizer(api_key=key, model=settings.summary_model or OPENAI_DEFAULT_MODEL)
    if provider in {"gemini", "google", "googleai"}:
        key = env.get("GOOGLE_API_KEY") or env.get("GEMINI_API_KEY")
        if not key:
            raise ConfigurationError("GOOGLE_API_KEY (or GEMINI_API_KEY) not configured")
        return GeminiSummarizer(api_key=key, model=settings.summary_model or GEMINI_DEFAULT_MODEL)
    raise ConfigurationError(f"Unknown summary provider: {settings.summary_provider!r}")
