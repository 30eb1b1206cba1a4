"""Platform-fitted social copy for news articles.

`ContentFitter.generate` asks the generation service for copy, trims it to the
platform's budget, and falls back to the local templates whenever the service
is unconfigured or fails. Service failures are reported through the notifier,
never raised; only `InvalidArticleError` escapes.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, Optional

from openai import OpenAI

from .config import Settings, get_settings
from .errors import InvalidArticleError
from .fallback import fallback_content
from .generator import build_client, request_generation
from .models import Article, GeneratedContent, Notice, Platform
from .platforms import PLATFORMS, coerce_platform, fits_budget, truncate_with_ellipsis
from .prompt_store import PromptStore, resolve_prompt
from .shortener import ShortenResult, shorten_url

logger = logging.getLogger(__name__)

Notifier = Callable[[Notice], None]
Shortener = Callable[[str], ShortenResult]

__all__ = [
    "ContentFitter",
    "fits_budget",
    "log_notice",
    "validate_article",
]


def log_notice(notice: Notice) -> None:
    logger.warning("%s", notice.message)


def validate_article(article: Article) -> None:
    """Raise InvalidArticleError unless the article has a title and some text."""
    if not (article.title or "").strip():
        raise InvalidArticleError("Article title is required")
    if not (article.body or "").strip() and not (article.summary or "").strip():
        raise InvalidArticleError("Article content or summary is required")


def fit_model_output(text: str, platform: Platform) -> tuple[str, bool]:
    """Trim generated text to what the platform leaves for copy."""
    return truncate_with_ellipsis(text, PLATFORMS[platform].content_budget)


class ContentFitter:
    """Produces share-ready copy for one article at a time; holds no per-call state."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        client: Optional[OpenAI] = None,
        prompt_store: Optional[PromptStore] = None,
        notifier: Optional[Notifier] = None,
        shortener: Optional[Shortener] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client if client is not None else build_client(self.settings)
        self.prompt_store = prompt_store
        self.notifier = notifier or log_notice
        self.shortener = shortener or shorten_url

    @property
    def hashtags(self) -> dict[Platform, str]:
        return {
            Platform.INSTAGRAM: self.settings.instagram_hashtags,
            Platform.TIKTOK: self.settings.tiktok_hashtags,
        }

    def _fallback(self, article: Article, platform: Platform) -> GeneratedContent:
        text, truncated = fallback_content(article, platform, hashtags=self.hashtags)
        return GeneratedContent(
            text=text,
            platform=platform,
            truncated=truncated,
            source="fallback",
        )

    def generate(
        self,
        article: Article,
        platform: Platform | str,
        url_override: Optional[str] = None,
        custom_instruction: Optional[str] = None,
    ) -> GeneratedContent:
        validate_article(article)
        resolved = coerce_platform(platform)

        if self.client is None:
            logger.warning(
                "OpenAI API key not configured, using fallback content generation"
            )
            return self._fallback(article, resolved)

        prompt = resolve_prompt(resolved, self.prompt_store, custom_instruction)
        outcome = request_generation(
            self.client,
            article,
            resolved,
            prompt,
            self.settings,
            url=url_override or article.url,
        )
        if not outcome.ok:
            failure = outcome.failure
            self.notifier(Notice(kind=failure.kind, message=failure.message))
            return self._fallback(article, resolved)

        text, truncated = fit_model_output(outcome.text, resolved)
        if truncated:
            logger.info(
                "Trimmed %s copy from %d to %d characters",
                resolved.value,
                len(outcome.text),
                len(text),
            )
        return GeneratedContent(text=text, platform=resolved, truncated=truncated)

    def prepare_url(self, url: Optional[str], shorten: bool = False) -> Optional[str]:
        """Return the link to share: shortened when asked and possible."""
        if not url or not shorten:
            return url
        result = self.shortener(url)
        if not result.shortened:
            self.notifier(
                Notice(
                    kind="shortener",
                    message="Failed to shorten URL; using the original link.",
                    level="info",
                )
            )
        return result.url

    def generate_all(
        self,
        article: Article,
        platforms: Optional[Iterable[Platform | str]] = None,
        *,
        url: Optional[str] = None,
        custom_instruction: Optional[str] = None,
        shorten: bool = False,
    ) -> tuple[Optional[str], dict[Platform, GeneratedContent]]:
        """
        Generate copy for several platforms in parallel.

        The link is resolved (and shortened, if asked) once before any request
        is issued. `platforms=None` means every platform in enum order; otherwise
        copy comes back keyed in the order given, and an empty list yields none.
        """
        validate_article(article)
        requested = list(Platform) if platforms is None else list(platforms)
        targets = [coerce_platform(p) for p in requested]
        targets = list(dict.fromkeys(targets))
        if not targets:
            return url, {}

        resolved_url = self.prepare_url(url or article.url, shorten=shorten)
        worker_count = max(1, min(self.settings.max_workers, len(targets)))
        results: dict[Platform, GeneratedContent] = {}

        with ThreadPoolExecutor(max_workers=worker_count) as executor:
            future_map = {
                executor.submit(
                    self.generate, article, platform, resolved_url, custom_instruction
                ): platform
                for platform in targets
            }
            for future in as_completed(future_map):
                results[future_map[future]] = future.result()

        return resolved_url, {platform: results[platform] for platform in targets}
