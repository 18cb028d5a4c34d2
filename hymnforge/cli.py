"""
Command-line interface for HymnForge.

Provides commands for:
- Analyzing, generating and optimizing lyrics
- Generating release assets and cover art
- Querying the Suno knowledge base
- Managing provider keys and the active provider

Usage:
    hymnforge analyze --file song.txt
    hymnforge generate "Red Sea crossing" --analyze
    hymnforge optimize --file song.txt -s "Add a Bridge section"
    hymnforge cover "Living Water" --file song.txt --output cover.png
    hymnforge keys set gemini
"""

from __future__ import annotations

import base64
import json
import logging
from pathlib import Path
from typing import Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from hymnforge import __version__
from hymnforge.adapter import providers_for, uses_live_search
from hymnforge.config import APP_NAME, DEFAULT_STYLE, PROVIDERS
from hymnforge.errors import HymnForgeError
from hymnforge.keys import SERVICES, KeyManager
from hymnforge.models import AISettings, AnalysisResult, GeneratedSong, Operation
from hymnforge.service import SongwritingService
from hymnforge.templates import EXAMPLE_LYRICS, TAG_CHEAT_SHEET, get_example

app = typer.Typer(
    name="hymnforge",
    help="HymnForge: AI songwriting assistant for Suno worship songs",
    add_completion=False,
)
console = Console()
logger = logging.getLogger("hymnforge.cli")

T = TypeVar("T")


def get_service() -> SongwritingService:
    return SongwritingService()


def get_key_manager() -> KeyManager:
    return KeyManager()


def version_callback(value: bool):
    if value:
        console.print(f"{APP_NAME} v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Enable debug logging",
    ),
):
    """HymnForge: analyze, write and polish Suno worship songs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ----------------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------------

def _load_settings(provider: Optional[str]) -> AISettings:
    try:
        return get_key_manager().load_settings(provider)
    except ValueError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)


def _read_lyrics(text: Optional[str], file: Optional[Path], example: Optional[int]) -> str:
    if text:
        return text
    if file:
        if not file.exists():
            console.print(f"[red]Error:[/] File not found: {file}")
            raise typer.Exit(1)
        return file.read_text(encoding="utf-8")
    if example:
        try:
            return get_example(example).content
        except IndexError as e:
            console.print(f"[red]Error:[/] {e}")
            raise typer.Exit(1)
    console.print("[red]Error:[/] Provide lyrics with --text, --file or --example", style="bold")
    raise typer.Exit(1)


def _run(label: str, settings: AISettings, call: Callable[[], T]) -> T:
    """Run a service call, turning failures into a notice naming the provider."""
    try:
        with console.status(f"[cyan]{label} with {settings.provider}...[/]"):
            return call()
    except HymnForgeError as e:
        logger.error("%s failed: %s", label, e)
        console.print(
            f"[red]{label} failed.[/] Please check your {settings.provider} API configuration."
        )
        console.print(f"[dim]{escape(str(e))}[/]")
        raise typer.Exit(1)


def _print_analysis(result: AnalysisResult):
    table = Table(title=f"Overall score: {result.overall_score:g}")
    table.add_column("Pillar", style="cyan")
    table.add_column("Score", justify="right")
    for name, value in result.scores.to_dict().items():
        color = "green" if value >= 80 else ("yellow" if value >= 60 else "red")
        table.add_row(name.capitalize(), f"[{color}]{value:g}[/]")
    console.print(table)

    console.print(Panel(Text(result.feedback), title="Feedback"))

    check = result.suno_tags_check
    if check.valid:
        console.print(f"[green]✓ Structure valid[/] {escape(check.message)}")
    else:
        missing = escape(", ".join(check.missing_tags) or "-")
        console.print(f"[yellow]⚠ Structure issues[/] (missing: {missing}) {escape(check.message)}")

    if result.suggestions:
        console.print("\n[bold]Suggestions:[/]")
        for i, suggestion in enumerate(result.suggestions, 1):
            console.print(f"  {i}. {escape(suggestion)}")


def _print_song(song: GeneratedSong):
    console.print(f"[bold green]{escape(song.title)}[/]")
    console.print(f"[cyan]Style:[/] {escape(song.style_prompts)}")
    console.print(f"[cyan]Exclude:[/] {escape(song.negative_prompts)}")
    if song.suggested_settings:
        s = song.suggested_settings
        vocal = f", vocal {s.vocal_gender}" if s.vocal_gender else ""
        console.print(
            f"[cyan]Settings:[/] weirdness {s.weirdness}/10, "
            f"style influence {s.style_influence}/10{vocal}"
        )
    console.print()
    console.print(song.lyrics, markup=False)


# ----------------------------------------------------------------------------
# Songwriting commands
# ----------------------------------------------------------------------------

@app.command()
def analyze(
    text: Optional[str] = typer.Option(None, "--text", "-t", help="Lyrics text"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Lyrics file"),
    example: Optional[int] = typer.Option(None, "--example", "-e", help="Built-in example number"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="gemini or zhipu"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
):
    """Score lyrics and suggest improvements."""
    lyrics = _read_lyrics(text, file, example)
    settings = _load_settings(provider)
    result = _run("Analysis", settings, lambda: get_service().analyze(lyrics, settings))

    if as_json:
        console.print_json(json.dumps(result.to_dict(), ensure_ascii=False))
    else:
        _print_analysis(result)


@app.command()
def generate(
    theme: str = typer.Argument(..., help="Theme or scripture for the song"),
    style: str = typer.Option(DEFAULT_STYLE, "--style", "-s", help="Style reference"),
    then_analyze: bool = typer.Option(False, "--analyze", "-a", help="Analyze the result too"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save lyrics to file"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="gemini or zhipu"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
):
    """Write a new song for a theme."""
    settings = _load_settings(provider)
    service = get_service()

    analysis = None
    if then_analyze:
        song, analysis = _run(
            "Generation", settings,
            lambda: service.generate_and_analyze(theme, settings, style=style),
        )
    else:
        song = _run("Generation", settings, lambda: service.generate(theme, settings, style=style))

    if output:
        output.write_text(song.lyrics, encoding="utf-8")
        console.print(f"[green]✓[/] Lyrics saved to {output}")

    if as_json:
        data = {"song": song.to_dict()}
        if analysis is not None:
            data["analysis"] = analysis.to_dict()
        console.print_json(json.dumps(data, ensure_ascii=False))
        return

    _print_song(song)
    if analysis is not None:
        console.print()
        _print_analysis(analysis)


@app.command()
def optimize(
    text: Optional[str] = typer.Option(None, "--text", "-t", help="Lyrics text"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Lyrics file"),
    example: Optional[int] = typer.Option(None, "--example", "-e", help="Built-in example number"),
    suggestion: Optional[list[str]] = typer.Option(
        None, "--suggestion", "-s",
        help="Suggestion to apply (repeatable). Without any, the lyrics are analyzed first.",
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save rewrite to file"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="gemini or zhipu"),
):
    """Rewrite lyrics applying suggestions."""
    lyrics = _read_lyrics(text, file, example)
    settings = _load_settings(provider)
    service = get_service()

    if suggestion:
        rewritten = _run(
            "Optimization", settings,
            lambda: service.optimize(lyrics, suggestion, settings),
        )
        analysis = None
    else:
        current = _run("Analysis", settings, lambda: service.analyze(lyrics, settings))
        rewritten, analysis = _run(
            "Optimization", settings,
            lambda: service.optimize_and_analyze(lyrics, current, settings),
        )

    if output:
        output.write_text(rewritten, encoding="utf-8")
        console.print(f"[green]✓[/] Rewrite saved to {output}")
    else:
        console.print(rewritten, markup=False)

    if analysis is not None:
        console.print()
        _print_analysis(analysis)


@app.command()
def assets(
    title: str = typer.Argument(..., help="Song title"),
    text: Optional[str] = typer.Option(None, "--text", "-t", help="Lyrics text"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Lyrics file"),
    example: Optional[int] = typer.Option(None, "--example", "-e", help="Built-in example number"),
    style: str = typer.Option("", "--style", "-s", help="Style prompts"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="gemini or zhipu"),
):
    """Generate a social caption and stylized title."""
    lyrics = _read_lyrics(text, file, example)
    settings = _load_settings(provider)
    result = _run(
        "Asset generation", settings,
        lambda: get_service().generate_assets(title, lyrics, settings, style=style),
    )
    console.print(f"[cyan]Title:[/] {escape(result.stylized_title)}")
    console.print(f"[cyan]Caption:[/] {escape(result.caption)}")


@app.command()
def cover(
    title: str = typer.Argument(..., help="Song title"),
    text: Optional[str] = typer.Option(None, "--text", "-t", help="Lyrics text"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Lyrics file"),
    example: Optional[int] = typer.Option(None, "--example", "-e", help="Built-in example number"),
    output: Path = typer.Option(Path("cover-art.png"), "--output", "-o", help="Image path"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="gemini or zhipu"),
):
    """Generate cover art (needs a Gemini key)."""
    lyrics = _read_lyrics(text, file, example)
    settings = _load_settings(provider)
    encoded = _run(
        "Cover generation", settings,
        lambda: get_service().generate_cover_image(title, lyrics, settings),
    )
    output.write_bytes(base64.b64decode(encoded))
    console.print(f"[green]✓[/] Cover saved to {output}")


@app.command()
def tips(
    query: str = typer.Argument(..., help="What you want to know about Suno"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="gemini or zhipu"),
):
    """Ask the Suno knowledge base."""
    settings = _load_settings(provider)
    answer = _run("Search", settings, lambda: get_service().search_tips(query, settings))
    console.print(answer, markup=False)
    if not uses_live_search(Operation.SEARCH_TIPS, settings.provider):
        console.print("\n[dim]Answered without live web search; details may be out of date.[/]")


# ----------------------------------------------------------------------------
# Reference data
# ----------------------------------------------------------------------------

@app.command()
def examples(
    index: Optional[int] = typer.Argument(None, help="Show one example in full"),
):
    """List or show the built-in example songs."""
    if index is None:
        table = Table(title="Example Songs")
        table.add_column("#", style="cyan")
        table.add_column("Title")
        table.add_column("Style", style="dim")
        for i, ex in enumerate(EXAMPLE_LYRICS, 1):
            table.add_row(str(i), ex.title, ex.style)
        console.print(table)
        return

    try:
        ex = get_example(index)
    except IndexError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)
    console.print(f"[bold]{ex.title}[/]")
    console.print(f"[cyan]Style:[/] {ex.style}\n")
    console.print(ex.content, markup=False)


@app.command()
def tags():
    """Show the structural tag cheat sheet."""
    table = Table(title="Suno Structure Tags")
    table.add_column("Tag", style="cyan")
    table.add_column("Meaning")
    for hint in TAG_CHEAT_SHEET:
        table.add_row(Text(hint.label), hint.description)
    console.print(table)


# ----------------------------------------------------------------------------
# Configuration
# ----------------------------------------------------------------------------

@app.command()
def provider(
    name: Optional[str] = typer.Argument(None, help="Provider to make active (gemini, zhipu)"),
):
    """Show or set the active provider."""
    km = get_key_manager()
    if name is None:
        console.print(f"Active provider: [cyan]{km.get_provider()}[/]")
        return
    try:
        km.set_provider(name)
    except ValueError:
        console.print(f"[red]Error:[/] Unknown provider '{name}'. Choose from: {', '.join(PROVIDERS)}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/] Active provider set to {name.lower()}")


def _key_usage(name: str) -> str:
    """Commands a provider key unlocks, from the dispatch table."""
    served = [op.value for op in Operation if name in providers_for(op)]
    return ", ".join(served) or "-"


@app.command()
def keys(
    action: str = typer.Argument(..., help="list, set, status, delete or export"),
    service: Optional[str] = typer.Argument(None, help="gemini or zhipu"),
):
    """Store, inspect and remove provider API keys.

    Either provider can analyze, generate, optimize and answer tips.
    Cover art is drawn by Gemini only, so keep a Gemini key around even
    when Zhipu is the active provider.

    Examples:
        hymnforge keys list
        hymnforge keys set zhipu
        hymnforge keys status gemini
        hymnforge keys delete zhipu
        hymnforge keys export > keys.env
    """
    km = get_key_manager()
    actions = ("list", "set", "status", "delete", "export")
    if action not in actions:
        console.print(f"[red]Error:[/] Unknown action '{action}'. Choose from: {', '.join(actions)}")
        raise typer.Exit(1)
    if action in ("set", "status", "delete") and not service:
        console.print(f"[red]Error:[/] '{action}' needs a provider: {', '.join(SERVICES)}")
        raise typer.Exit(1)

    if action == "list":
        active = km.get_provider()
        table = Table(title="Provider Keys")
        table.add_column("Provider", style="cyan")
        table.add_column("Key")
        table.add_column("From", style="yellow")
        table.add_column("Used for", style="dim")
        for info in km.list_keys():
            label = f"{info.service} (active)" if info.service == active else info.service
            key = f"[green]{info.masked_value}[/]" if info.is_set else "[red]missing[/]"
            table.add_row(label, key, info.source if info.is_set else "-", _key_usage(info.service))
        console.print(table)
        console.print("\n[dim]Lookup order: environment, system keychain, config file[/]")
        if not km.get_key_info("gemini").is_set:
            console.print("[yellow]Cover art needs a Gemini key.[/]")

    elif action == "set":
        key = typer.prompt(f"{service} API key", hide_input=True).strip()
        if not key:
            console.print("[red]Error:[/] Empty key, nothing saved")
            raise typer.Exit(1)
        storage = km.set_key(service, key)
        console.print(f"[green]✓[/] {service} key stored in {storage}")

    elif action == "status":
        info = km.get_key_info(service)
        console.print(f"[cyan]{service}[/] unlocks: {_key_usage(service)}")
        if info.is_set:
            console.print(f"[green]✓[/] Key {info.masked_value} found in {info.source}")
        else:
            env_var = SERVICES.get(service, f"{service.upper()}_API_KEY")
            console.print(f"[red]✗[/] No key. Run [cyan]hymnforge keys set {service}[/] or set {env_var}")

    elif action == "delete":
        if km.delete_key(service):
            console.print(f"[green]✓[/] Removed stored {service} key")
        else:
            console.print(f"[yellow]⚠[/] No stored {service} key")

    else:
        env_vars = km.export_to_env()
        if not env_vars:
            console.print("[yellow]No keys configured.[/]")
            return
        for var, value in env_vars.items():
            console.print(f"export {var}='{value}'", markup=False)


@app.command()
def info():
    """Show dependency and configuration diagnostics."""
    from hymnforge.diagnostics import collect_diagnostics, summarize_checks

    console.print(f"[bold]{APP_NAME} v{__version__}[/]\n")
    checks = collect_diagnostics(get_key_manager())

    table = Table(title="Diagnostics")
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    table.add_column("Detail")
    colors = {"ok": "green", "warn": "yellow", "error": "red"}
    for check in checks:
        color = colors.get(check.status, "white")
        table.add_row(check.name, f"[{color}]{check.status}[/]", check.detail)
    console.print(table)

    summary = summarize_checks(checks)
    console.print(
        f"\n{summary['ok']} ok, {summary['warn']} warnings, {summary['error']} errors"
    )
    if summary["error"]:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
