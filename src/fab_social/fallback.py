"""Template copy used when the generation service is unavailable.

Pure and deterministic: the same article and platform always produce the same
text, with no network access.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from .generator import strip_tags
from .models import Article, Platform
from .platforms import CLUB_MARKER, PLATFORMS, coerce_platform, truncate_with_ellipsis

logger = logging.getLogger(__name__)

SENTENCE_SPLIT = re.compile(r"[.!?]")
TWITTER_EXCERPT_CHARS = 100
INSTAGRAM_EXCERPT_CHARS = 2000
TIKTOK_EXCERPT_CHARS = 100

DEFAULT_HASHTAGS: dict[Platform, str] = {
    Platform.INSTAGRAM: "#BarnsleyFC #Tykes #YouReds",
    Platform.TIKTOK: "#BarnsleyFC #football #fyp",
}


def first_sentence(text: str) -> str:
    for segment in SENTENCE_SPLIT.split(text):
        if segment.strip():
            return segment.strip()
    return ""


def fallback_content(
    article: Article,
    platform: Platform | str,
    *,
    hashtags: Optional[dict[Platform, str]] = None,
) -> tuple[str, bool]:
    """
    Compose template copy for `platform`.

    Returns the text and whether it had to be shortened. Unknown platforms get
    the bare title.
    """
    try:
        resolved = coerce_platform(platform)
    except ValueError:
        logger.warning("No fallback template for platform %r; using the title", platform)
        return article.title, False

    tags = {**DEFAULT_HASHTAGS, **(hashtags or {})}
    source = article.summary if (article.summary or "").strip() else article.body
    text = strip_tags(source)
    title = article.title

    if resolved is Platform.TWITTER:
        excerpt = first_sentence(text)[:TWITTER_EXCERPT_CHARS]
        tweet = f"{title}\n\n{excerpt} {CLUB_MARKER}"
        return truncate_with_ellipsis(tweet, PLATFORMS[resolved].content_budget)

    if resolved is Platform.FACEBOOK:
        return f"{title}\n\n{text} {CLUB_MARKER}", False

    if resolved is Platform.INSTAGRAM:
        caption = (
            f"{title}\n\n{text[:INSTAGRAM_EXCERPT_CHARS]}\n\n"
            f"{tags[Platform.INSTAGRAM]} {CLUB_MARKER}"
        )
        return truncate_with_ellipsis(caption, PLATFORMS[resolved].max_length)

    if resolved is Platform.TIKTOK:
        caption = (
            f"{title}\n\n{text[:TIKTOK_EXCERPT_CHARS]}\n\n"
            f"{tags[Platform.TIKTOK]} {CLUB_MARKER}"
        )
        return truncate_with_ellipsis(caption, PLATFORMS[resolved].max_length)

    return title, False
