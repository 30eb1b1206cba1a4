"""is.gd link shortening; falls back to the original URL on any failure."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShortenResult:
    url: str
    shortened: bool
    error: Optional[str] = None


def shorten_url(
    url: str,
    *,
    client: Optional[httpx.Client] = None,
    endpoint: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ShortenResult:
    """Return the shortened link, or the original one when the service fails."""
    settings = get_settings()
    target = endpoint or settings.shortener_endpoint
    params = {"format": "json", "url": url}
    owns_client = client is None
    http = client or httpx.Client(timeout=timeout or settings.shortener_timeout)
    try:
        response = http.get(target, params=params)
        response.raise_for_status()
        payload = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Error shortening URL %s: %s", url, exc)
        return ShortenResult(url=url, shortened=False, error=str(exc))
    finally:
        if owns_client:
            http.close()

    short = payload.get("shorturl") if isinstance(payload, dict) else None
    if not isinstance(short, str) or not short.strip():
        reason = payload.get("errormessage") if isinstance(payload, dict) else None
        logger.warning("Shortener returned no link for %s: %s", url, reason or payload)
        return ShortenResult(url=url, shortened=False, error=reason or "missing shorturl")
    return ShortenResult(url=short.strip(), shortened=True)
