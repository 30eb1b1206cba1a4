import pytest

from fab_social.fallback import fallback_content, first_sentence
from fab_social.models import Article, Platform

MARKER = "🔴⚪"


def _derby_article(**overrides) -> Article:
    data = {
        "title": "Derby Day Preview",
        "summary": "Reds host rivals this Saturday at Oakwell.",
        "body": "<p>Full preview inside.</p>",
    }
    data.update(overrides)
    return Article(**data)


def test_twitter_uses_title_and_first_sentence():
    text, truncated = fallback_content(_derby_article(), Platform.TWITTER)

    assert text == f"Derby Day Preview\n\nReds host rivals this Saturday at Oakwell {MARKER}"
    assert truncated is False
    assert len(text) <= 258


def test_twitter_excerpt_is_capped_at_100_characters():
    article = _derby_article(summary="a" * 150 + ". Second sentence.")

    text, _ = fallback_content(article, "twitter")

    excerpt = text.split("\n\n", 1)[1].rsplit(" ", 1)[0]
    assert excerpt == "a" * 100


def test_twitter_long_title_is_trimmed_with_ellipsis():
    article = _derby_article(title="T" * 300)

    text, truncated = fallback_content(article, Platform.TWITTER)

    assert len(text) == 258
    assert text.endswith("...")
    assert truncated is True


def test_facebook_strips_html_from_body_when_no_summary():
    article = Article(title="Minutes published", body="<p>Hello <b>fans</b>. More soon!</p>")

    text, truncated = fallback_content(article, Platform.FACEBOOK)

    assert text == f"Minutes published\n\nHello fans. More soon! {MARKER}"
    assert truncated is False


def test_whitespace_summary_falls_through_to_body():
    article = Article(title="Board update", summary="   ", body="<p>Body wins.</p>")

    text, _ = fallback_content(article, Platform.FACEBOOK)

    assert "Body wins." in text


def test_instagram_appends_club_hashtags():
    text, truncated = fallback_content(_derby_article(), Platform.INSTAGRAM)

    assert text.startswith("Derby Day Preview\n\n")
    assert text.endswith(f"#BarnsleyFC #Tykes #YouReds {MARKER}")
    assert truncated is False


def test_instagram_caption_is_capped_at_2200():
    article = Article(title="X" * 200, body="word " * 1000)

    text, truncated = fallback_content(article, Platform.INSTAGRAM)

    assert len(text) == 2200
    assert text.endswith("...")
    assert truncated is True


def test_tiktok_uses_first_100_characters_and_custom_hashtags():
    article = Article(title="Kit launch", body="b" * 500)

    text, truncated = fallback_content(
        article, Platform.TIKTOK, hashtags={Platform.TIKTOK: "#Reds"}
    )

    assert text == f"Kit launch\n\n{'b' * 100}\n\n#Reds {MARKER}"
    assert truncated is False


def test_unknown_platform_returns_title():
    text, truncated = fallback_content(_derby_article(), "myspace")

    assert text == "Derby Day Preview"
    assert truncated is False


@pytest.mark.parametrize("platform", list(Platform))
def test_fallback_is_deterministic(platform):
    article = _derby_article()

    assert fallback_content(article, platform) == fallback_content(article, platform)


def test_first_sentence_skips_empty_segments():
    assert first_sentence("...  Up the Reds! Next game.") == "Up the Reds"
    assert first_sentence("") == ""


def test_unknown_platform_never_raises_with_hashtag_overrides():
    text, truncated = fallback_content(
        _derby_article(), "myspace", hashtags={Platform.TIKTOK: "#Reds"}
    )

    assert (text, truncated) == ("Derby Day Preview", False)
