"""cli.py: Command‑line interface for the **travel BFF** cache
==============================================================

A small **Typer** application for operators: inspect the shared cache,
trigger a cleanup, preview the adaptive strategy an endpoint would get,
render canonical cache keys and run the HTTP service.

Usage examples
--------------
::

    # Totals, hit rate and scaling advice
    travel-bff stats

    # Evict expired / low-priority entries now
    travel-bff cleanup

    # Which TTL would the geolocation endpoint get in the US?
    travel-bff strategy geolocation_search --region us

    # Canonical key for a flight search
    travel-bff key flights TIA FCO 2025-07-01

    # Serve the API
    travel-bff serve --port 8080 --reload

Notes
-----
* All store-backed commands run **asynchronously** using ``asyncio.run``.
* The backend (Supabase or in-memory) and its credentials are read from
  :pymod:`travel_bff.config.settings`; override via ``BFF_*`` environment
  variables or config files.
"""
from __future__ import annotations

import asyncio
import sys
from typing import List, Optional

import typer
from rich import print as rprint
from rich import print_json
from rich.traceback import install as rich_tb_install

from travel_bff.api.container import create_store
from travel_bff.config.settings import get_settings
from travel_bff.core.facade import SmartCache
from travel_bff.core.keys import build_cache_key
from travel_bff.core.store import AbstractCacheStore
from travel_bff.core.strategy import StrategyResolver
from travel_bff.utils.exceptions import TravelBFFError

# pretty tracebacks for CLI users
rich_tb_install(show_locals=False)

# ---------------------------------------------------------------------------
# Typer application
# ---------------------------------------------------------------------------
app = typer.Typer(add_completion=False, rich_markup_mode="rich", no_args_is_help=True)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _get_store() -> AbstractCacheStore:
    """Create a store adapter based on current Settings."""

    store, _ = create_store(get_settings())
    return store


async def _safe_close(store: AbstractCacheStore) -> None:
    """Ensure the store is closed even if an exception bubbles up."""

    try:
        await store.close()
    except Exception:  # pragma: no cover – log & swallow in CLI context
        rprint("[yellow]Warning:[/] failed to close store cleanly.")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command(help="Show cache totals, hit rate and scaling recommendations.")
def stats() -> None:
    async def _run() -> None:
        store = _get_store()
        try:
            resolver = StrategyResolver(store, default_region=get_settings().default_region)
            health = await SmartCache(store, resolver).system_health()
        finally:
            await _safe_close(store)
        print_json(data=health.to_dict())

    asyncio.run(_run())


@app.command(help="Run one cache cleanup pass now.")
def cleanup() -> None:
    async def _run() -> bool:
        store = _get_store()
        try:
            report = await store.cleanup()
        finally:
            await _safe_close(store)
        print_json(data=report.to_dict())
        return report.ok

    if not asyncio.run(_run()):
        rprint("[red]✗ Cleanup failed.[/]")
        raise typer.Exit(code=1)
    rprint("[green]✓ Cleanup completed.[/]")


@app.command(help="Preview the adaptive strategy chosen for an endpoint.")
def strategy(
    endpoint: str = typer.Argument(..., help="Endpoint identifier, e.g. geolocation_search"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Caller region"),
) -> None:
    async def _run() -> None:
        store = _get_store()
        try:
            resolver = StrategyResolver(store, default_region=get_settings().default_region)
            chosen = await resolver.resolve(endpoint, region)
        finally:
            await _safe_close(store)
        print_json(data=chosen.to_dict())

    asyncio.run(_run())


@app.command(help="Render the canonical cache key for NAMESPACE and PARAMS.")
def key(
    namespace: str = typer.Argument(..., help="Key namespace, e.g. geo_search"),
    params: Optional[List[str]] = typer.Argument(None, help="Key parameters in order"),
) -> None:
    try:
        rendered = build_cache_key(namespace, *(params or []))
    except TravelBFFError as exc:
        rprint(f"[red]Invalid key:[/] {exc.message}")
        raise typer.Exit(code=2) from exc
    typer.echo(rendered)


@app.command(help="Run the HTTP service with uvicorn.")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (defaults to settings)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port (defaults to settings)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "travel_bff.api.app:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:  # pragma: no cover
    """CLI entry‑point used by `python -m travel_bff.cli`."""

    try:
        app()
    except TravelBFFError as exc:
        rprint(f"[red]Error:[/] {exc.message}")
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
