"""
CLI Main - Typer-based command-line interface.

Usage:
    buildersearch load data/search_index.json
    buildersearch search "red shoes" --filter status=active --sort-by popularity
    buildersearch advanced "shoes" --facet category
    buildersearch index
    buildersearch serve
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from buildersearch.config import BuilderSearchError
from buildersearch.domains.search import SortBy

app = typer.Typer(
    name="buildersearch",
    help="BuilderSearch - Record search and ranking",
    add_completion=False,
)
console = Console()


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    limit: int = typer.Option(10, "--limit", "-n", min=0, help="Number of results"),
    sort_by: SortBy = typer.Option(SortBy.RELEVANCE, "--sort-by", "-s", help="Result ordering"),
    filters: list[str] = typer.Option(
        [], "--filter", "-f", help='Field filter, e.g. status=active or views={"min": 10}'
    ),
) -> None:
    """Search records and print them ranked."""
    params = {
        "query": query,
        "filters": _parse_filters(filters),
        "limit": limit,
        "sortBy": sort_by.value,
    }
    asyncio.run(_search_async(params))


async def _search_async(params: dict[str, Any]) -> None:
    """Async search implementation."""
    engine, store = _build_engine()

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            progress.add_task("Searching...", total=None)
            response = await engine.execute(params)

        console.print(f"\n[yellow]Query:[/yellow] {response.query}")
        console.print(
            f"[dim]{response.result_count} results in {response.execution_time}ms[/dim]\n"
        )
        console.print(_results_table(response.results))

    except BuilderSearchError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)
    finally:
        await _close(store)


@app.command()
def advanced(
    query: str = typer.Argument(..., help="Search query"),
    facets: list[str] = typer.Option([], "--facet", help="Field to facet on (repeatable)"),
    limit: int = typer.Option(20, "--limit", "-n", min=0, help="Number of results"),
    sort_by: SortBy = typer.Option(SortBy.RELEVANCE, "--sort-by", "-s", help="Result ordering"),
    filters: list[str] = typer.Option([], "--filter", "-f", help="Field filter"),
) -> None:
    """Search records and show facet counts."""
    params = {
        "query": query,
        "filters": _parse_filters(filters),
        "limit": limit,
        "sortBy": sort_by.value,
        "facetFields": facets,
    }
    asyncio.run(_advanced_async(params))


async def _advanced_async(params: dict[str, Any]) -> None:
    """Async faceted search implementation."""
    engine, store = _build_engine()

    try:
        response = await engine.advanced_search(params)

        console.print(
            f"\n[yellow]Query:[/yellow] {response.query} "
            f"[dim]({response.result_count} results, {response.execution_time})[/dim]\n"
        )
        console.print(_results_table(response.results))

        for field, values in response.facets.items():
            lines = "\n".join(f"{v.value}: {v.count}" for v in values) or "[dim]no values[/dim]"
            console.print(Panel(lines, title=f"Facet: {field}"))

    except BuilderSearchError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)
    finally:
        await _close(store)


@app.command()
def load(
    json_path: Path = typer.Argument(..., help="JSON array of records"),
    replace: bool = typer.Option(False, "--replace", help="Delete existing records first"),
) -> None:
    """Import records from a JSON file into the SQLite store."""
    if not json_path.exists():
        console.print(f"[red]Error:[/red] File not found: {json_path}")
        raise typer.Exit(1)

    asyncio.run(_load_async(json_path, replace))


async def _load_async(json_path: Path, replace: bool) -> None:
    """Async import implementation."""
    from buildersearch.adapters import JSONFileRecordStore, SQLiteRecordStore
    from buildersearch.config import get_settings

    settings = get_settings()
    store = SQLiteRecordStore(
        settings.db_path,
        retry_attempts=settings.store_retry_attempts,
        retry_delay_seconds=settings.store_retry_delay_seconds,
    )

    try:
        records = await JSONFileRecordStore(json_path).find({})
        await store.initialize()
        if replace:
            removed = await store.clear()
            console.print(f"[dim]Removed {removed} existing records[/dim]")
        count = await store.insert_records(records)
        total = await store.count()
    except BuilderSearchError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)
    finally:
        await store.close()

    console.print(f"\n[green]Imported {count} records[/green] [dim](total: {total})[/dim]")


@app.command()
def index(
    top: int = typer.Option(10, "--top", "-t", help="Most frequent tokens to show"),
) -> None:
    """Build the inverted index over title and description."""
    asyncio.run(_index_async(top))


async def _index_async(top: int) -> None:
    """Async index build."""
    engine, store = _build_engine()

    try:
        built = await engine.build_index()
    except BuilderSearchError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)
    finally:
        await _close(store)

    table = Table(title=f"Inverted Index ({len(built)} tokens)")
    table.add_column("Token", style="cyan")
    table.add_column("Postings", style="green")

    for token, postings in sorted(built.items(), key=lambda kv: len(kv[1]), reverse=True)[:top]:
        table.add_row(token, str(len(postings)))

    console.print(table)


@app.command()
def init() -> None:
    """Create the data directory and SQLite schema."""
    asyncio.run(_init_async())


async def _init_async() -> None:
    """Async initialization."""
    from buildersearch.adapters import SQLiteRecordStore
    from buildersearch.config import get_settings

    settings = get_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)

    store = SQLiteRecordStore(settings.db_path)
    try:
        await store.initialize()
    finally:
        await store.close()

    console.print("\n[green]Initialization complete![/green]")
    console.print(f"[dim]Database: {settings.db_path}[/dim]")


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Host to bind"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to bind"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    from buildersearch.config import get_settings

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print("\n[green]Starting BuilderSearch API server[/green]")
    console.print(f"[dim]http://{host}:{port}[/dim]\n")

    uvicorn.run(
        "buildersearch.interfaces.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
        log_level=settings.log_level,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from buildersearch import __version__

    console.print(f"BuilderSearch v{__version__}")


def _build_engine():
    """Engine and store from settings."""
    from buildersearch.adapters import create_record_store
    from buildersearch.config import get_settings
    from buildersearch.domains.search import SearchRankingEngine

    settings = get_settings()
    store = create_record_store(settings)
    engine = SearchRankingEngine(
        store,
        cache_max_entries=settings.cache_max_entries,
        default_limit=settings.search_default_limit,
        advanced_default_limit=settings.advanced_search_default_limit,
    )
    return engine, store


async def _close(store: Any) -> None:
    close = getattr(store, "close", None)
    if close is not None:
        await close()


def _parse_filters(raw_filters: list[str]) -> dict[str, Any]:
    """
    Parse ``field=value`` pairs.

    Values are decoded as JSON when possible (numbers, lists, ranges) and
    kept as plain strings otherwise.
    """
    filters: dict[str, Any] = {}
    for item in raw_filters:
        field, sep, value = item.partition("=")
        if not sep or not field:
            raise typer.BadParameter(f"Expected field=value, got: {item}")
        try:
            filters[field] = json.loads(value)
        except json.JSONDecodeError:
            filters[field] = value
    return filters


def _results_table(results: list[dict[str, Any]]) -> Table:
    """Render scored records."""
    table = Table()
    table.add_column("#", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Score", style="green", justify="right")
    table.add_column("Matched", style="yellow")

    for i, result in enumerate(results, 1):
        title = result.get("title") or result.get("name") or "(untitled)"
        table.add_row(
            str(i),
            str(title),
            f"{result.get('relevanceScore', 0):.1f}",
            ", ".join(result.get("matchedTerms", [])),
        )

    return table


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
