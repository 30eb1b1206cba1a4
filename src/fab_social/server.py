"""FastAPI service exposing social copy generation to the site's share dialog."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .errors import InvalidArticleError, PromptStoreError
from .fitter import ContentFitter
from .models import Article, GeneratedContent, Notice, Platform
from .platforms import (
    DEFAULT_PROMPTS,
    PLATFORMS,
    character_count,
    fits_budget,
    share_intent_url,
)
from .prompt_store import JsonPromptStore, settings_key


app = FastAPI(title="FAB Social Content")


def _add_cors(app: FastAPI) -> None:
    """Allow the site front end to call the API from another origin."""
    allow_all = os.getenv("CORS_ALLOW_ALL", "true").lower() == "true"
    origins_env = os.getenv("CORS_ALLOW_ORIGINS", "")
    origins = [o.strip() for o in origins_env.split(",") if o.strip()]
    allow_credentials = (
        os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() == "true"
    )
    if allow_all or not origins:
        origins = ["*"]
    if origins == ["*"] and allow_credentials:
        # Starlette/FastAPI disallow wildcard origins when credentials are enabled.
        allow_credentials = False
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )


_add_cors(app)


class GenerateRequest(BaseModel):
    article: Article
    platform: Platform
    url: Optional[str] = Field(None, description="Link to share; defaults to article.url.")
    custom_instruction: Optional[str] = None
    shorten: bool = False


class GenerateAllRequest(BaseModel):
    article: Article
    platforms: Optional[List[Platform]] = None
    url: Optional[str] = None
    custom_instruction: Optional[str] = None
    shorten: bool = False


class FitsRequest(BaseModel):
    content: str
    platform: Platform
    url: str = ""


class PromptUpdate(BaseModel):
    text: Optional[str] = Field(None, description="Override text; empty clears it.")


def _prompt_store() -> JsonPromptStore:
    return JsonPromptStore()


def _build_fitter(notices: List[Notice]) -> ContentFitter:
    """Fitter wired to the persisted prompt overrides; notices land in `notices`."""
    return ContentFitter(prompt_store=_prompt_store(), notifier=notices.append)


def _notice_payload(notices: List[Notice]) -> List[Dict[str, str]]:
    return [{"kind": n.kind, "level": n.level, "message": n.message} for n in notices]


def _content_payload(content: GeneratedContent, url: Optional[str]) -> Dict[str, Any]:
    link = url or ""
    return {
        "text": content.text,
        "platform": content.platform.value,
        "truncated": content.truncated,
        "source": content.source,
        "character_count": character_count(content.text, content.platform),
        "max_length": PLATFORMS[content.platform].max_length,
        "fits_budget": fits_budget(content.text, content.platform, link),
        "share_url": share_intent_url(content.platform, content.text, link) if link else None,
    }


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/social/generate")
def generate(payload: GenerateRequest) -> Dict[str, Any]:
    notices: List[Notice] = []
    fitter = _build_fitter(notices)
    try:
        url = fitter.prepare_url(payload.url or payload.article.url, shorten=payload.shorten)
        content = fitter.generate(
            payload.article,
            payload.platform,
            url_override=url,
            custom_instruction=payload.custom_instruction,
        )
    except InvalidArticleError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc

    body = _content_payload(content, url)
    body["url"] = url
    body["warnings"] = _notice_payload(notices)
    return body


@app.post("/social/generate-all")
def generate_all(payload: GenerateAllRequest) -> Dict[str, Any]:
    notices: List[Notice] = []
    fitter = _build_fitter(notices)
    try:
        url, items = fitter.generate_all(
            payload.article,
            payload.platforms,
            url=payload.url,
            custom_instruction=payload.custom_instruction,
            shorten=payload.shorten,
        )
    except InvalidArticleError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc

    return {
        "url": url,
        "items": {
            platform.value: _content_payload(content, url)
            for platform, content in items.items()
        },
        "warnings": _notice_payload(notices),
    }


@app.post("/social/fits")
def check_fits(payload: FitsRequest) -> Dict[str, Any]:
    return {
        "fits": fits_budget(payload.content, payload.platform, payload.url),
        "length": len(payload.content) + len(payload.url) + 2,
        "max_length": PLATFORMS[payload.platform].max_length,
    }


@app.get("/settings/prompts")
def list_prompts() -> Dict[str, Any]:
    try:
        overrides = _prompt_store().load()
    except PromptStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc
    return {
        settings_key(platform): {
            "override": overrides[platform],
            "effective": overrides[platform] or DEFAULT_PROMPTS[platform],
            "default": DEFAULT_PROMPTS[platform],
        }
        for platform in Platform
    }


@app.put("/settings/prompts/{platform}")
def update_prompt(platform: Platform, payload: PromptUpdate) -> Dict[str, Any]:
    store = _prompt_store()
    try:
        store.set(platform, payload.text)
    except PromptStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    override = store.get(platform)
    return {
        "platform": platform.value,
        "override": override,
        "effective": override or DEFAULT_PROMPTS[platform],
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "fab_social.server:app",
        host=os.getenv("FAB_SOCIAL_HOST", "0.0.0.0"),
        port=int(os.getenv("FAB_SOCIAL_PORT", "8000")),
        reload=os.getenv("FAB_SOCIAL_RELOAD", "false").lower() == "true",
    )
