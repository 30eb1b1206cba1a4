"""Per-platform prompt overrides edited from the admin Settings screen."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Optional, Protocol

from .config import get_settings
from .errors import PromptStoreError
from .file_lock import locked_path
from .models import Platform
from .platforms import DEFAULT_PROMPTS, coerce_platform
from .schema import validate_prompt_settings

logger = logging.getLogger(__name__)


class PromptStore(Protocol):
    def get(self, platform: Platform) -> Optional[str]:
        """Return the override for `platform`, or None to use the default."""


def settings_key(platform: Platform | str) -> str:
    """Column name used by the site backend, e.g. ``twitter_prompt``."""
    return f"{coerce_platform(platform).value}_prompt"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = value.strip()
    return text or None


class InMemoryPromptStore:
    """Dictionary-backed store; handy for tests and embedding."""

    def __init__(self, overrides: Mapping[Platform | str, Optional[str]] | None = None):
        self._overrides: dict[Platform, Optional[str]] = {}
        for key, value in (overrides or {}).items():
            self._overrides[coerce_platform(key)] = value

    def get(self, platform: Platform) -> Optional[str]:
        return _clean(self._overrides.get(coerce_platform(platform)))

    def set(self, platform: Platform | str, text: Optional[str]) -> None:
        self._overrides[coerce_platform(platform)] = _clean(text)


def default_store_path() -> Path:
    """Prompt override file (override via PROMPT_STORE_PATH)."""
    settings = get_settings()
    if settings.prompt_store_path:
        return Path(settings.prompt_store_path).expanduser().resolve()
    return Path(__file__).resolve().parents[2] / "data" / "prompts.json"


class JsonPromptStore:
    """
    Prompt overrides persisted as one JSON object.

    The document mirrors the backend's settings row:
    ``{"twitter_prompt": "...", "facebook_prompt": null, ...}``. It is validated
    against the bundled schema on every read and write; writes replace the file
    atomically and are serialized within the process.
    """

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path else default_store_path()

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as exc:
            raise PromptStoreError(f"{self.path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise PromptStoreError(f"{self.path} must contain a JSON object.")
        return validate_prompt_settings(data)

    def load(self) -> dict[Platform, Optional[str]]:
        """Return every platform's override (None where the default applies)."""
        with locked_path(self.path):
            data = self._read()
        return {platform: _clean(data.get(settings_key(platform))) for platform in Platform}

    def get(self, platform: Platform) -> Optional[str]:
        with locked_path(self.path):
            data = self._read()
        return _clean(data.get(settings_key(platform)))

    def set(self, platform: Platform | str, text: Optional[str]) -> None:
        """Store an override; empty text clears it."""
        key = settings_key(platform)
        with locked_path(self.path):
            data = self._read()
            data[key] = _clean(text)
            data["updated_at"] = datetime.now(timezone.utc).isoformat()
            validate_prompt_settings(data)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                    f.write("\n")
                os.replace(tmp_name, self.path)
            except OSError as exc:
                Path(tmp_name).unlink(missing_ok=True)
                raise PromptStoreError(f"Could not write {self.path}: {exc}") from exc
        logger.info("Updated %s override in %s", key, self.path)


def resolve_prompt(
    platform: Platform | str,
    store: Optional[PromptStore] = None,
    custom_instruction: Optional[str] = None,
) -> str:
    """
    Return the instruction text sent with a generation request.

    The stored override wins over the built-in default; an ad-hoc instruction
    is appended to whichever applies. A store that cannot be read is logged and
    treated as empty.
    """
    resolved = coerce_platform(platform)
    base = DEFAULT_PROMPTS[resolved]
    if store is not None:
        try:
            override = store.get(resolved)
        except Exception as exc:
            logger.warning("Failed to read prompt override for %s: %s", resolved.value, exc)
            override = None
        if override and override.strip():
            base = override.strip()

    extra = (custom_instruction or "").strip()
    if extra:
        return f"{base}\n\nAdditional instructions: {extra}"
    return base
