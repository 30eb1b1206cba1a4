import httpx
import openai
import pytest

from fab_social.config import Settings
from fab_social.errors import InvalidArticleError
from fab_social.fitter import ContentFitter
from fab_social.models import Article, Platform
from fab_social.prompt_store import InMemoryPromptStore
from fab_social.shortener import ShortenResult

MARKER = "🔴⚪"
OPENAI_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/responses")


class DummyResponse:
    def __init__(self, text):
        self.output_text = text
        self.status = "completed"


class DummyResponses:
    def __init__(self, text=None, exc=None):
        self.text = text
        self.exc = exc
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        return DummyResponse(self.text)


class DummyClient:
    def __init__(self, text=None, exc=None):
        self.responses = DummyResponses(text=text, exc=exc)


def _article(**overrides) -> Article:
    data = {
        "title": "Derby Day Preview",
        "summary": "Reds host rivals this Saturday at Oakwell.",
        "body": "<p>Full preview of the derby.</p>",
        "url": "https://fab.barnsleyfc.co.uk/news/42",
    }
    data.update(overrides)
    return Article(**data)


def _fitter(client=None, **kwargs) -> tuple[ContentFitter, list]:
    notices = []
    settings = Settings(openai_api_key="test-key" if client is not None else None)
    fitter = ContentFitter(settings, client=client, notifier=notices.append, **kwargs)
    return fitter, notices


def test_missing_credential_uses_fallback_without_notice():
    fitter, notices = _fitter()

    result = fitter.generate(_article(), Platform.TWITTER)

    assert fitter.client is None
    assert result.source == "fallback"
    assert result.text.startswith("Derby Day Preview\n\n")
    assert result.text.endswith(MARKER)
    assert len(result.text) <= 258
    assert notices == []


def test_model_output_is_returned_for_twitter():
    client = DummyClient(text="  Derby day is here! Get behind the Reds 🔴⚪  ")
    fitter, notices = _fitter(client)

    result = fitter.generate(_article(), "twitter")

    assert result.text == "Derby day is here! Get behind the Reds 🔴⚪"
    assert result.platform is Platform.TWITTER
    assert result.truncated is False
    assert result.source == "model"
    assert notices == []

    call = client.responses.calls[0]
    assert call["max_output_tokens"] == 150
    system, user = call["input"]
    assert "twitter" in system["content"]
    assert "22 characters" in user["content"]
    assert "https://fab.barnsleyfc.co.uk/news/42" in user["content"]
    assert 'Summary: "Reds host rivals this Saturday at Oakwell."' in user["content"]


def test_body_excerpt_is_used_when_summary_missing():
    client = DummyClient(text="Post")
    fitter, _ = _fitter(client)

    fitter.generate(_article(summary=None, body="<p>" + "z" * 400 + "</p>"), Platform.FACEBOOK)

    user = client.responses.calls[0]["input"][1]["content"]
    assert f'Summary: "{"z" * 200}"' in user


def test_long_twitter_output_is_trimmed():
    client = DummyClient(text="x" * 300)
    fitter, _ = _fitter(client)

    result = fitter.generate(_article(), Platform.TWITTER)

    assert len(result.text) == 258
    assert result.text == "x" * 255 + "..."
    assert result.truncated is True


def test_long_instagram_output_is_trimmed():
    client = DummyClient(text="y" * 2300)
    fitter, _ = _fitter(client)

    result = fitter.generate(_article(), Platform.INSTAGRAM)

    assert len(result.text) <= 2200
    assert result.text.endswith("...")
    assert result.truncated is True


@pytest.mark.parametrize(
    "exc, kind",
    [
        (openai.APITimeoutError(request=OPENAI_REQUEST), "timeout"),
        (openai.APIConnectionError(request=OPENAI_REQUEST), "transport"),
        (
            openai.InternalServerError(
                "boom", response=httpx.Response(500, request=OPENAI_REQUEST), body=None
            ),
            "server",
        ),
        (
            openai.AuthenticationError(
                "bad key", response=httpx.Response(401, request=OPENAI_REQUEST), body=None
            ),
            "auth",
        ),
        (
            openai.RateLimitError(
                "slow down", response=httpx.Response(429, request=OPENAI_REQUEST), body=None
            ),
            "rate_limit",
        ),
        (RuntimeError("socket closed"), "transport"),
    ],
)
def test_service_failures_fall_back_with_notice(exc, kind):
    fitter, notices = _fitter(DummyClient(exc=exc))

    result = fitter.generate(_article(), Platform.TWITTER)

    assert result.source == "fallback"
    assert result.text
    assert len(result.text) <= 258
    assert [n.kind for n in notices] == [kind]
    assert notices[0].message.endswith("using fallback content.")


def test_empty_model_output_is_treated_as_malformed():
    fitter, notices = _fitter(DummyClient(text="   "))

    result = fitter.generate(_article(), Platform.TIKTOK)

    assert result.source == "fallback"
    assert notices[0].kind == "malformed"
    assert notices[0].message.startswith("Invalid response format from OpenAI API")


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": ""},
        {"title": "   "},
        {"summary": None, "body": ""},
        {"summary": "  ", "body": " \n "},
    ],
)
def test_invalid_articles_raise(overrides):
    fitter, _ = _fitter(DummyClient(text="unused"))

    with pytest.raises(InvalidArticleError):
        fitter.generate(_article(**overrides), Platform.TWITTER)

    assert fitter.client.responses.calls == []


@pytest.mark.parametrize("overrides", [{"summary": None}, {"body": ""}])
def test_body_or_summary_alone_is_enough(overrides):
    fitter, _ = _fitter()

    result = fitter.generate(_article(**overrides), Platform.FACEBOOK)

    assert result.text


def test_stored_prompt_and_custom_instruction_reach_the_model():
    client = DummyClient(text="Post")
    store = InMemoryPromptStore({"facebook": "Write like the club secretary."})
    fitter, _ = _fitter(client, prompt_store=store)

    fitter.generate(
        _article(), Platform.FACEBOOK, custom_instruction="Mention ticket prices."
    )

    user = client.responses.calls[0]["input"][1]["content"]
    assert user.startswith(
        "Write like the club secretary.\n\nAdditional instructions: Mention ticket prices."
    )


def test_generate_all_shortens_once_and_covers_every_platform():
    client = DummyClient(text="Post")
    shortened = []

    def fake_shortener(url):
        shortened.append(url)
        return ShortenResult(url="https://is.gd/abc123", shortened=True)

    fitter, notices = _fitter(client, shortener=fake_shortener)

    url, items = fitter.generate_all(_article(), shorten=True)

    assert url == "https://is.gd/abc123"
    assert shortened == ["https://fab.barnsleyfc.co.uk/news/42"]
    assert list(items) == list(Platform)
    assert all(item.text == "Post" for item in items.values())
    assert len(client.responses.calls) == 4
    twitter_calls = [c for c in client.responses.calls if c["max_output_tokens"] == 150]
    assert "https://is.gd/abc123" in twitter_calls[0]["input"][1]["content"]
    assert notices == []


def test_generate_all_without_credential_returns_templates():
    fitter, _ = _fitter()

    url, items = fitter.generate_all(_article(), [Platform.INSTAGRAM, "twitter"])

    assert url == "https://fab.barnsleyfc.co.uk/news/42"
    assert list(items) == [Platform.INSTAGRAM, Platform.TWITTER]
    assert all(item.source == "fallback" for item in items.values())


def test_prepare_url_keeps_original_when_shortening_fails():
    def failing_shortener(url):
        return ShortenResult(url=url, shortened=False, error="503")

    fitter, notices = _fitter(shortener=failing_shortener)

    assert fitter.prepare_url("https://example.com/a", shorten=True) == "https://example.com/a"
    assert notices[0].kind == "shortener"
    assert fitter.prepare_url("https://example.com/a") == "https://example.com/a"


def test_generate_all_with_empty_list_returns_nothing():
    client = DummyClient(text="Post")
    fitter, _ = _fitter(client)

    url, items = fitter.generate_all(_article(), [])

    assert items == {}
    assert url is None
    assert client.responses.calls == []


def test_generate_all_keeps_requested_order():
    fitter, _ = _fitter()

    _, items = fitter.generate_all(_article(), ["tiktok", Platform.FACEBOOK, "tiktok"])

    assert list(items) == [Platform.TIKTOK, Platform.FACEBOOK]


def test_unknown_platform_is_rejected_before_any_request():
    client = DummyClient(text="unused")
    fitter, _ = _fitter(client)

    with pytest.raises(ValueError, match="Unknown platform"):
        fitter.generate(_article(), "myspace")

    assert client.responses.calls == []
    assert not hasattr(fitter, "fallback")
