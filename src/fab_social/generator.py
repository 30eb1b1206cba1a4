"""Calls to the external text-generation service.

`request_generation` never raises for service problems: the outcome is either
generated text or a classified `GenerationFailure`, so callers branch on a
value instead of catching exceptions.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

import openai
from openai import OpenAI

from .config import Settings
from .models import Article, Platform
from .platforms import PLATFORMS, TWITTER_URL_OVERHEAD

logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r"<[^>]*>")
CONTEXT_EXCERPT_CHARS = 200

FAILURE_MESSAGES: dict[str, str] = {
    "missing_credential": "OpenAI API key not configured",
    "auth": "OpenAI API key is invalid or expired",
    "rate_limit": "Rate limit exceeded. Please try again in a moment",
    "server": "OpenAI service is temporarily unavailable",
    "timeout": "OpenAI request timed out",
    "transport": "Could not reach the OpenAI service",
    "malformed": "Invalid response format from OpenAI API",
}


@dataclass(frozen=True)
class GenerationFailure:
    kind: str
    detail: str = ""

    @property
    def message(self) -> str:
        base = FAILURE_MESSAGES.get(self.kind, "Failed to generate content")
        return f"{base}; using fallback content."


@dataclass(frozen=True)
class GenerationOutcome:
    text: Optional[str] = None
    failure: Optional[GenerationFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.text is not None


def build_client(settings: Settings) -> Optional[OpenAI]:
    """Create an OpenAI client, or None when no key is configured."""
    if not settings.openai_api_key:
        return None
    return OpenAI(
        api_key=settings.openai_api_key,
        timeout=settings.request_timeout,
        max_retries=0,
    )


def strip_tags(text: str) -> str:
    return TAG_PATTERN.sub("", text or "")


def context_excerpt(article: Article) -> str:
    """Summary when written, otherwise the opening of the tag-stripped body."""
    summary = (article.summary or "").strip()
    if summary:
        return summary
    return strip_tags(article.body)[:CONTEXT_EXCERPT_CHARS]


def build_messages(
    article: Article,
    platform: Platform,
    prompt: str,
    url: Optional[str] = None,
) -> list[dict[str, str]]:
    config = PLATFORMS[platform]
    system_prompt = (
        f"You are a social media expert who writes engaging {platform.value} content. "
        f"{config.system_hint} Use emojis effectively."
    )
    user_lines = [
        prompt,
        "",
        f'Title: "{article.title.strip()}"',
        f'Summary: "{context_excerpt(article)}"',
        "",
    ]
    if platform is Platform.TWITTER:
        if url:
            user_lines.append(f"Link (added automatically, do not repeat it): {url}")
        user_lines.append(
            f"Generate content for {platform.value}. Remember the URL will be added "
            f"automatically, taking {TWITTER_URL_OVERHEAD} characters total, so keep your "
            f"content under {config.content_budget} characters."
        )
    else:
        user_lines.append(f"Generate content for {platform.value}")
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": "\n".join(user_lines)},
    ]


def _response_text(response: Any) -> Optional[str]:
    """Extract generated text; None when the payload lacks it."""
    text = getattr(response, "output_text", None)
    if isinstance(text, str) and text.strip():
        return text.strip()
    return None


def classify_exception(exc: Exception) -> GenerationFailure:
    """Map an SDK exception onto a failure kind."""
    detail = str(exc)
    # Timeout subclasses connection error; check it first.
    if isinstance(exc, openai.APITimeoutError):
        return GenerationFailure("timeout", detail)
    if isinstance(exc, openai.APIConnectionError):
        return GenerationFailure("transport", detail)
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return GenerationFailure("auth", detail)
    if isinstance(exc, openai.RateLimitError):
        return GenerationFailure("rate_limit", detail)
    if isinstance(exc, openai.APIStatusError):
        if exc.status_code in (401, 403):
            return GenerationFailure("auth", detail)
        if exc.status_code == 429:
            return GenerationFailure("rate_limit", detail)
        return GenerationFailure("server", detail)
    if isinstance(exc, (openai.APIResponseValidationError, ValueError, TypeError)):
        return GenerationFailure("malformed", detail)
    return GenerationFailure("transport", detail)


def request_generation(
    client: Optional[OpenAI],
    article: Article,
    platform: Platform,
    prompt: str,
    settings: Settings,
    *,
    url: Optional[str] = None,
) -> GenerationOutcome:
    """Issue a single generation request; never retries and never raises for service errors."""
    if client is None:
        return GenerationOutcome(failure=GenerationFailure("missing_credential"))

    request_kwargs = {
        "model": settings.generation_model,
        "input": build_messages(article, platform, prompt, url),
        "max_output_tokens": PLATFORMS[platform].max_output_tokens,
        "temperature": settings.temperature,
        "timeout": settings.request_timeout,
    }
    try:
        response = client.responses.create(**request_kwargs)
    except Exception as exc:
        failure = classify_exception(exc)
        logger.warning(
            "Generation request for %s failed (%s): %s", platform.value, failure.kind, exc
        )
        return GenerationOutcome(failure=failure)

    text = _response_text(response)
    if text is None:
        status = getattr(response, "status", None)
        logger.warning(
            "Generation response for %s missing output text (status=%s)",
            platform.value,
            status,
        )
        return GenerationOutcome(
            failure=GenerationFailure("malformed", f"status={status}")
        )
    return GenerationOutcome(text=text)
