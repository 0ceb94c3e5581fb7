"""CLI for probing models and running enrichment outside the API."""

import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

from .config import settings
from .exceptions import BookmarkStoreError, ConfigurationError, ResponseParseError
from .models.enrichment import AttemptOutcome, EnrichmentReport, EnrichmentRequest, EnrichmentStatus
from .services.bookmark_store import BookmarkStore
from .services.enrichment_service import build_enrichment_service
from .services.gemini_client import GeminiClient, get_model_candidates
from .services.response_parser import extract_response_text
from .services.secrets import resolve_gemini_api_key

app = typer.Typer(help="Bookmark enrichment CLI")
console = Console()

PROBE_PROMPT = "Reply with exactly: OK"

STATUS_COLORS = {
    EnrichmentStatus.ENRICHED: "green",
    EnrichmentStatus.FALLBACK_PERSISTED: "yellow",
    EnrichmentStatus.FALLBACK_NOT_PERSISTED: "red",
    EnrichmentStatus.SKIPPED_INVALID_ID: "dim",
}


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def _build_store() -> BookmarkStore:
    if not settings.supabase_url or not settings.supabase_key:
        raise ConfigurationError("Supabase URL and key must be configured")
    return BookmarkStore(settings.supabase_url, settings.supabase_key, table=settings.bookmarks_table)


@app.command("check-model")
def check_model():
    """Check the Gemini key against the model candidate list."""
    try:
        api_key = resolve_gemini_api_key(settings)
    except ConfigurationError as e:
        _fail(f"Missing Gemini API key: {e}. Set GEMINI_API_KEY in .env or your shell env.")

    console.print("GEMINI_API_KEY: [green]SET[/green]")
    client = GeminiClient(api_key, base_url=settings.gemini_base_url, timeout=settings.gemini_timeout_seconds)
    candidates = get_model_candidates(settings.gemini_model)

    selected, attempts = asyncio.run(
        client.generate_with_fallback(candidates, PROBE_PROMPT, json_output=False)
    )

    for attempt in attempts:
        if attempt.outcome != AttemptOutcome.SUCCESS:
            console.print(
                f"[yellow]Model check failed ({attempt.status_code or attempt.error}) for {attempt.model}[/yellow]"
            )

    if selected is None:
        _fail("Gemini key test failed: no supported model found from fallback list.")

    try:
        reply = extract_response_text(selected.payload).strip()
    except ResponseParseError:
        reply = ""

    console.print("[green]Gemini key test passed.[/green]")
    console.print(f"Model used: [cyan]{selected.model}[/cyan]")
    console.print(f"Model response: {reply or '(empty)'}")


def _print_report(report: EnrichmentReport) -> None:
    color = STATUS_COLORS.get(report.status, "white")
    console.print(f"\n[bold]Bookmark {report.request_id}[/bold]")
    console.print(f"  Status: [{color}]{report.status.value}[/{color}]")
    console.print(f"  Model: {report.model or '-'}")
    console.print(f"  Title: {report.result.title}")
    console.print(f"  Summary: {report.result.summary}")
    console.print(f"  Category: {report.result.category.value}")
    if report.error:
        console.print(f"  Error: {report.error}")


@app.command()
def enrich(
    bookmark_id: str = typer.Argument(..., help="Bookmark UUID"),
    url: str = typer.Argument(..., help="Bookmark URL"),
    title: str = typer.Option("", "--title", "-t", help="User-provided title"),
):
    """Run enrichment for a single bookmark."""
    try:
        service = build_enrichment_service(settings)
    except ConfigurationError as e:
        _fail(f"Configuration error: {e}")

    request = EnrichmentRequest(id=bookmark_id.strip(), url=url.strip(), title=title.strip())
    report = asyncio.run(service.enrich(request))
    _print_report(report)

    if report.status != EnrichmentStatus.ENRICHED:
        raise typer.Exit(1)


@app.command()
def pending(limit: int = typer.Option(50, "--limit", "-l", help="Number of results")):
    """Show bookmarks still waiting for enrichment."""
    try:
        store = _build_store()
        bookmarks = asyncio.run(store.list_processing(limit=limit))
    except (ConfigurationError, BookmarkStoreError) as e:
        _fail(str(e))

    if not bookmarks:
        console.print("[yellow]No bookmarks are processing[/yellow]")
        return

    table = Table(title=f"Processing Bookmarks ({len(bookmarks)})")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("URL")

    for bookmark in bookmarks:
        table.add_row(bookmark.id, (bookmark.title or "")[:40], bookmark.url[:60])

    console.print(table)


@app.command()
def backfill(limit: int = typer.Option(20, "--limit", "-l", help="Maximum bookmarks to enrich")):
    """Enrich bookmarks stuck in processing, one at a time."""
    try:
        service = build_enrichment_service(settings)
        bookmarks = asyncio.run(service.store.list_processing(limit=limit))
    except (ConfigurationError, BookmarkStoreError) as e:
        _fail(str(e))

    if not bookmarks:
        console.print("[yellow]No bookmarks are processing[/yellow]")
        return

    async def _run() -> list[EnrichmentReport]:
        reports = []
        for bookmark in bookmarks:
            request = EnrichmentRequest(id=bookmark.id, url=bookmark.url, title=bookmark.title or "")
            reports.append(await service.enrich(request))
        return reports

    reports = asyncio.run(_run())

    table = Table(title=f"Backfill Results ({len(reports)})")
    table.add_column("ID", style="cyan")
    table.add_column("Status")
    table.add_column("Category")
    table.add_column("Title")

    for report in reports:
        color = STATUS_COLORS.get(report.status, "white")
        table.add_row(
            report.request_id,
            f"[{color}]{report.status.value}[/{color}]",
            report.result.category.value,
            report.result.title[:40],
        )

    console.print(table)

    enriched = sum(1 for r in reports if r.status == EnrichmentStatus.ENRICHED)
    console.print(f"\n[green]{enriched}[/green] enriched, {len(reports) - enriched} fell back")


if __name__ == "__main__":
    app()
