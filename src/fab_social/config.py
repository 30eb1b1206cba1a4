"""Configuration helpers for social content generation."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", populate_by_name=True
    )

    openai_api_key: str | None = Field(None, alias="OPENAI_API_KEY")
    generation_model: str = Field(
        "gpt-4o-mini", description="Model used to write social copy."
    )
    temperature: float = Field(0.7, description="Generation temperature.")
    request_timeout: float = Field(
        10.0,
        description="Seconds to wait for the generation service before falling back.",
    )
    prompt_store_path: str | None = Field(
        None,
        alias="PROMPT_STORE_PATH",
        description="JSON file holding per-platform prompt overrides; defaults to data/prompts.json.",
    )
    shortener_endpoint: str = Field(
        "https://is.gd/create.php", description="is.gd compatible shortening endpoint."
    )
    shortener_timeout: float = Field(5.0, description="Seconds to wait for the shortener.")
    instagram_hashtags: str = Field(
        "#BarnsleyFC #Tykes #YouReds",
        description="Hashtags appended to template Instagram captions.",
    )
    tiktok_hashtags: str = Field(
        "#BarnsleyFC #football #fyp",
        description="Hashtags appended to template TikTok captions.",
    )
    max_workers: int = Field(
        4, description="Parallel generation requests when fitting several platforms."
    )


def get_settings() -> Settings:
    """Return a fresh settings instance."""
    return Settings()
