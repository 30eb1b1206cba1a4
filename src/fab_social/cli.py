"""Command-line entry points for social copy generation."""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich import print as rprint
from rich.logging import RichHandler

from .errors import InvalidArticleError, PromptStoreError
from .fitter import ContentFitter
from .models import Article, GeneratedContent, Notice, Platform
from .platforms import DEFAULT_PROMPTS, PLATFORMS, compose_share_text, fits_budget
from .prompt_store import JsonPromptStore, settings_key

app = typer.Typer(help="Generate platform-fitted social posts for FAB news articles.")
prompts_app = typer.Typer(help="Show or edit per-platform prompt overrides.")
app.add_typer(prompts_app, name="prompts")


def _load_article(path: Path) -> Article:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        if len(data) != 1:
            raise typer.BadParameter("The JSON file must contain exactly one article.")
        data = data[0]
    if "body" not in data and "content" in data:
        data["body"] = data.pop("content")
    return Article(**data)


def _print_notice(notice: Notice) -> None:
    colour = "yellow" if notice.level == "warning" else "cyan"
    rprint(f"[{colour}]{notice.message}[/{colour}]")


def _to_plain(url: Optional[str], items: dict[Platform, GeneratedContent]) -> dict:
    return {
        "url": url,
        "items": {
            platform.value: {
                "text": content.text,
                "truncated": content.truncated,
                "source": content.source,
                "fits_budget": fits_budget(content.text, platform, url or ""),
            }
            for platform, content in items.items()
        },
    }


def _render_markdown(url: Optional[str], items: dict[Platform, GeneratedContent]) -> str:
    blocks = []
    for platform, content in items.items():
        text = compose_share_text(content.text, url) if url else content.text
        blocks.append(f"## {PLATFORMS[platform].name}\n\n{text}")
    return "\n\n".join(blocks) + "\n"


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


@app.command("generate")
def generate_command(
    path: Path = typer.Argument(..., help="Path to a JSON article payload."),
    platforms: Optional[List[Platform]] = typer.Option(
        None,
        "--platform",
        "-p",
        help="Platform to write for; repeat for several. Defaults to all.",
        case_sensitive=False,
    ),
    url: Optional[str] = typer.Option(
        None, "--url", help="Link to share; defaults to the article's url."
    ),
    instruction: Optional[str] = typer.Option(
        None, "--instruction", "-i", help="Extra instructions appended to the prompt."
    ),
    shorten: bool = typer.Option(False, "--shorten", help="Shorten the link via is.gd first."),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "-o",
        help="Optional path to write output (.md or .json). Defaults to stdout.",
    ),
):
    """Write share copy for one article, falling back to templates when needed."""
    article = _load_article(path)
    fitter = ContentFitter(prompt_store=JsonPromptStore(), notifier=_print_notice)
    try:
        resolved_url, items = fitter.generate_all(
            article,
            platforms or None,
            url=url,
            custom_instruction=instruction,
            shorten=shorten,
        )
    except InvalidArticleError as exc:
        rprint(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    if out:
        if out.suffix.lower() == ".json":
            out.write_text(
                json.dumps(_to_plain(resolved_url, items), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        else:
            out.write_text(_render_markdown(resolved_url, items), encoding="utf-8")
        rprint(f"[cyan]Wrote output to {out}[/cyan]")
    else:
        rprint(_render_markdown(resolved_url, items))


@app.command("check")
def check_command(
    content: str = typer.Argument(..., help="Post text without the link."),
    platform: Platform = typer.Option(
        Platform.TWITTER, "--platform", "-p", case_sensitive=False
    ),
    url: str = typer.Option("", "--url", help="Link that will be appended."),
):
    """Check whether content plus link fits the platform limit."""
    total = len(content) + len(url) + 2
    limit = PLATFORMS[platform].max_length
    if fits_budget(content, platform, url):
        rprint(f"[green]{total}/{limit} characters: fits {PLATFORMS[platform].name}.[/green]")
        return
    rprint(f"[red]{total}/{limit} characters: too long for {PLATFORMS[platform].name}.[/red]")
    raise typer.Exit(code=1)


@prompts_app.command("show")
def prompts_show():
    """Print the effective prompt for each platform."""
    overrides = JsonPromptStore().load()
    for platform in Platform:
        override = overrides[platform]
        label = "override" if override else "default"
        rprint(f"[cyan]{settings_key(platform)}[/cyan] ({label})")
        rprint(override or DEFAULT_PROMPTS[platform])
        rprint("")


@prompts_app.command("set")
def prompts_set(
    platform: Platform = typer.Argument(..., case_sensitive=False),
    text: str = typer.Argument("", help="New prompt; pass an empty string to reset."),
):
    """Store or clear a platform's prompt override."""
    store = JsonPromptStore()
    try:
        store.set(platform, text)
    except PromptStoreError as exc:
        rprint(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    state = "updated" if text.strip() else "reset to default"
    rprint(f"[green]{settings_key(platform)} {state} in {store.path}[/green]")


def main():
    app()


if __name__ == "__main__":
    main()
