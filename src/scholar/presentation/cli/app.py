"""Scholar CLI application using Typer.

Operator tool for running the read operations from a shell: searches,
venue views and a backend health check. Results are printed as JSON.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

import typer
from rich.console import Console
from rich.table import Table

from scholar.application.dtos.venues import VenueListFilters
from scholar.domain.shared.exceptions import DomainException
from scholar.presentation import dependencies
from scholar.presentation.logging_config import configure_logging

app = typer.Typer(
    name="scholar",
    help="Scholar - scholarly metadata search and venue enrichment CLI",
    no_args_is_help=True,
)
console = Console()


search_app = typer.Typer(
    name="search",
    help="Full-text search over works and persons",
    no_args_is_help=True,
)
venues_app = typer.Typer(
    name="venues",
    help="Enriched venue views",
    no_args_is_help=True,
)
app.add_typer(search_app)
app.add_typer(venues_app)


@app.callback()
def main() -> None:
    configure_logging()


def _run(operation: Callable[[], Awaitable[Any]]) -> Any:
    """Run one async operation and release shared resources afterwards."""

    async def runner() -> Any:
        try:
            return await operation()
        finally:
            await dependencies.shutdown()

    try:
        return asyncio.run(runner())
    except DomainException as e:
        console.print(f"[bold red]{e.code.value}[/bold red]: {e.message}")
        raise typer.Exit(code=1) from e


def _print_result(result: Any) -> None:
    if result is None:
        console.print("[yellow]Not found[/yellow]")
        raise typer.Exit(code=1)
    console.print_json(data=result.to_dict())


def _parse_filters(raw: Optional[list[str]]) -> dict[str, str]:
    filters: dict[str, str] = {}
    for item in raw or []:
        key, sep, value = item.partition("=")
        if not sep:
            console.print(f"[red]Filter must look like key=value: {item}[/red]")
            raise typer.Exit(code=2)
        filters[key.strip()] = value.strip()
    return filters


# -----------------------------------------------------------------------------
# Search
# -----------------------------------------------------------------------------


@search_app.command("works")
def search_works(
    query: str = typer.Argument(..., help="Search terms"),
    filters: Optional[list[str]] = typer.Option(
        None,
        "--filter",
        "-f",
        help="Filter as key=value (type, language, year_from, year_to, ...)",
    ),
    page: Optional[int] = typer.Option(None, help="Page number (1-based)"),
    limit: Optional[int] = typer.Option(None, help="Results per page (max 100)"),
    offset: Optional[int] = typer.Option(None, help="Offset, snapped to a page"),
) -> None:
    """Search works."""
    parsed = _parse_filters(filters)
    result = _run(
        lambda: dependencies.get_search_works_query().execute(
            query,
            parsed,
            page=page,
            limit=limit,
            offset=offset,
        ),
    )
    _print_result(result)


@search_app.command("persons")
def search_persons(
    query: str = typer.Argument(..., help="Search terms"),
    verified: Optional[bool] = typer.Option(
        None,
        "--verified/--unverified",
        help="Only verified or only unverified persons",
    ),
    page: Optional[int] = typer.Option(None, help="Page number (1-based)"),
    limit: Optional[int] = typer.Option(None, help="Results per page (max 100)"),
    offset: Optional[int] = typer.Option(None, help="Offset, snapped to a page"),
) -> None:
    """Search persons."""
    parsed = {"verified": verified} if verified is not None else {}
    result = _run(
        lambda: dependencies.get_search_persons_query().execute(
            query,
            parsed,
            page=page,
            limit=limit,
            offset=offset,
        ),
    )
    _print_result(result)


@search_app.command("all")
def search_all(
    query: str = typer.Argument(..., help="Search terms"),
    limit: int = typer.Option(5, help="Results per entity kind"),
) -> None:
    """Search works and persons at once."""
    result = _run(lambda: dependencies.get_global_search_query().execute(query, limit))
    _print_result(result)


# -----------------------------------------------------------------------------
# Venues
# -----------------------------------------------------------------------------


@venues_app.command("show")
def show_venue(
    venue_id: int = typer.Argument(..., help="Venue id"),
    subjects: bool = typer.Option(True, help="Include subjects"),
    yearly: bool = typer.Option(True, help="Include yearly statistics"),
    top_authors: bool = typer.Option(True, help="Include top authors"),
    recent_works: bool = typer.Option(True, help="Include recent works"),
) -> None:
    """Show one venue with its enrichment."""
    result = _run(
        lambda: dependencies.get_venue_enriched_query().execute(
            venue_id,
            include_subjects=subjects,
            include_yearly=yearly,
            include_top_authors=top_authors,
            include_recent_works=recent_works,
        ),
    )
    _print_result(result)


@venues_app.command("list")
def list_venues(
    venue_type: Optional[str] = typer.Option(None, "--type", help="Venue type"),
    search: Optional[str] = typer.Option(None, help="Match name, ISSN or eISSN"),
    min_id: Optional[int] = typer.Option(None, help="Smallest venue id"),
    sort_by: str = typer.Option("name", help="name, type, impact_factor, works_count or id"),
    sort_order: str = typer.Option("ASC", help="ASC or DESC"),
    page: Optional[int] = typer.Option(None, help="Page number (1-based)"),
    limit: Optional[int] = typer.Option(None, help="Results per page (max 100)"),
) -> None:
    """List venues with subjects."""
    filters = VenueListFilters(
        type=venue_type,
        search=search,
        min_id=min_id,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    result = _run(lambda: dependencies.get_list_venues_query().execute(filters))
    _print_result(result)


# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------


@app.command("health")
def health() -> None:
    """Check database, index and cache reachability."""

    async def check() -> dict[str, bool]:
        database, index, cache = await asyncio.gather(
            dependencies.get_query_executor().ping(),
            dependencies.get_index_adapter().ping(),
            dependencies.get_cache_store().ping(),
        )
        return {"database": database, "search_index": index, "cache": cache}

    status = _run(check)

    table = Table(title="Backend health")
    table.add_column("Component", style="cyan")
    table.add_column("Status")
    for component, ok in status.items():
        table.add_row(component, "[green]up[/green]" if ok else "[red]down[/red]")
    console.print(table)

    if not status["database"]:
        raise typer.Exit(code=1)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
