"""Data models for social content generation."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Platform(str, Enum):
    """Social networks the share dialog can target."""

    TWITTER = "twitter"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"


class Article(BaseModel):
    """News article as stored by the site backend."""

    title: str
    body: str = Field("", description="Rich text/HTML body of the article.")
    summary: Optional[str] = Field(None, description="Short standfirst, if written.")
    image_url: Optional[str] = None
    url: Optional[str] = Field(None, description="Canonical public link to the article.")


@dataclass
class GeneratedContent:
    """Platform-ready copy for one article; the caller appends the link."""

    text: str
    platform: Platform
    truncated: bool = False
    source: str = "model"


@dataclass(frozen=True)
class Notice:
    """Advisory message for the user when generation degraded to template mode."""

    kind: str
    message: str
    level: str = "warning"
