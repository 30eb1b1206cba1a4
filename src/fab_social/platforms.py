"""Per-platform limits, prompts and share helpers.

Every supported network has exactly one `PlatformConfig` entry in `PLATFORMS`;
lookups by raw string go through `coerce_platform`, which rejects anything
outside the `Platform` enum.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from .models import Platform

CLUB_MARKER = "🔴⚪"
ELLIPSIS = "..."
# Shortened link plus the two newlines the share dialog inserts before it.
TWITTER_URL_OVERHEAD = 22
SHARE_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class PlatformConfig:
    name: str
    max_length: int
    url_overhead: int
    color: str
    system_hint: str
    max_output_tokens: int
    placeholder: str
    share_style: Optional[str] = None

    @property
    def content_budget(self) -> int:
        """Characters left for copy once the link overhead is reserved."""
        return self.max_length - self.url_overhead


PLATFORMS: dict[Platform, PlatformConfig] = {
    Platform.TWITTER: PlatformConfig(
        name="Twitter",
        max_length=280,
        url_overhead=TWITTER_URL_OVERHEAD,
        color="#1DA1F2",
        system_hint=(
            "The URL will be added automatically and will take up 20 characters plus "
            "2 newlines. Keep the tweet content under 258 characters to ensure the "
            "total length with URL stays under 280 characters."
        ),
        max_output_tokens=150,
        placeholder="Write your tweet...",
        share_style="intent",
    ),
    Platform.FACEBOOK: PlatformConfig(
        name="Facebook",
        max_length=63206,
        url_overhead=0,
        color="#1877F2",
        system_hint=(
            "You can use up to 63,206 characters. Format the text for readability "
            "with paragraphs and bullet points where appropriate."
        ),
        max_output_tokens=500,
        placeholder="Write your Facebook post...",
        share_style="sharer",
    ),
    Platform.INSTAGRAM: PlatformConfig(
        name="Instagram",
        max_length=2200,
        url_overhead=0,
        color="#E4405F",
        system_hint=(
            "You can use up to 2,200 characters. Make the caption engaging and use "
            "appropriate hashtags."
        ),
        max_output_tokens=500,
        placeholder="Write your Instagram caption...",
    ),
    Platform.TIKTOK: PlatformConfig(
        name="TikTok",
        max_length=2200,
        url_overhead=0,
        color="#000000",
        system_hint=(
            "Create a short, engaging caption suitable for TikTok with relevant hashtags."
        ),
        max_output_tokens=500,
        placeholder="Write your TikTok caption...",
    ),
}

if set(PLATFORMS) != set(Platform):
    raise RuntimeError("PLATFORMS must configure every Platform member exactly once.")


DEFAULT_PROMPTS: dict[Platform, str] = {
    Platform.TWITTER: (
        "Create a tweet that is professional yet engaging, aimed at football fans. "
        f"Use emojis effectively - a red dot followed by white dot ({CLUB_MARKER}) is a "
        "favorite among Barnsley fans! Keep the tone enthusiastic and community-focused."
    ),
    Platform.FACEBOOK: (
        "Create a Facebook post that is informative and engaging. The tone should be "
        "professional but conversational, encouraging discussion and community "
        "engagement. Feel free to use formatting like paragraphs and bullet points for "
        "better readability. Include relevant emojis where appropriate."
    ),
    Platform.INSTAGRAM: (
        "Create an Instagram caption that is visually descriptive and engaging. Use "
        "relevant emojis and hashtags. The tone should be more casual and vibrant than "
        "other platforms while maintaining professionalism. Include our signature red "
        f"and white dots ({CLUB_MARKER}) where appropriate."
    ),
    Platform.TIKTOK: (
        "Create a TikTok caption that is trendy and engaging, perfect for video "
        "content. The tone should be casual and energetic, appealing to a younger "
        "audience while maintaining professionalism. Use relevant emojis and hashtags "
        "that resonate with football fans and the TikTok community."
    ),
}


def coerce_platform(value: Platform | str) -> Platform:
    """Return the Platform for `value`; raise ValueError for unknown names."""
    if isinstance(value, Platform):
        return value
    try:
        return Platform(str(value).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(p.value for p in Platform)
        raise ValueError(f"Unknown platform {value!r}; expected one of: {allowed}.") from exc


def get_platform_config(platform: Platform | str) -> PlatformConfig:
    return PLATFORMS[coerce_platform(platform)]


def truncate_with_ellipsis(text: str, limit: int) -> tuple[str, bool]:
    """
    Fit `text` into `limit` characters.

    Over-long text keeps its first `limit - 3` characters followed by "...".
    Returns the text and whether it was shortened.
    """
    if len(text) <= limit:
        return text, False
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS, True


def fits_budget(content: str, platform: Platform | str, url_text: str) -> bool:
    """True when content, separator and link fit the platform's character limit."""
    config = get_platform_config(platform)
    return len(content) + len(url_text) + len(SHARE_SEPARATOR) <= config.max_length


def character_count(content: str, platform: Platform | str) -> int:
    """Counter shown next to the editor: copy length plus reserved link overhead."""
    return len(content) + get_platform_config(platform).url_overhead


def compose_share_text(content: str, url: str) -> str:
    return f"{content}{SHARE_SEPARATOR}{url}"


def share_intent_url(platform: Platform | str, content: str, url: str) -> str | None:
    """
    Build the web share link for a platform.

    Instagram and TikTok have no web share intent; callers copy the composed
    text to the clipboard instead, so None is returned.
    """
    config = get_platform_config(platform)
    if config.share_style == "intent":
        final = compose_share_text(content, url)
        return f"https://twitter.com/intent/tweet?text={quote(final, safe='')}"
    if config.share_style == "sharer":
        return (
            "https://www.facebook.com/sharer/sharer.php"
            f"?u={quote(url, safe='')}&quote={quote(content, safe='')}"
        )
    return None
