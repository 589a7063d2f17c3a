"""Catalog subcommand: sync, list."""

from __future__ import annotations

import time

import typer

from depmap.ingestion.base import CatalogSource
from depmap.ingestion.polymarket.gamma import GammaCatalogSource
from depmap.storage.catalog import last_synced_at, list_markets, save_catalog
from depmap.storage.db import get_connection, init_schema
from depmap.storage.history_cache import HistoryCache

app = typer.Typer(help="Event/market catalog snapshot")


@app.command("sync")
def sync(
    ctx: typer.Context,
    limit: int | None = typer.Option(None, "--limit", "-n", help="Max events to fetch"),
) -> None:
    """Fetch active events from the Gamma API and replace the local snapshot."""
    settings = ctx.obj["settings"]
    source: CatalogSource = GammaCatalogSource(settings.gamma_api_base, timeout=settings.request_timeout_sec)
    events = source.fetch_events(limit=limit or settings.event_limit)
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        written = save_catalog(conn, events)
        purged = HistoryCache(conn, ttl_sec=settings.history_cache_ttl_sec).purge_expired()
        typer.echo(f"Synced {len(events)} events, {written} markets. Purged {purged} stale histories.")
    finally:
        conn.close()


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    query: str | None = typer.Option(None, "--query", "-q", help="Filter by question substring"),
    limit: int = typer.Option(50, "--limit", "-n", help="Max rows to show"),
) -> None:
    """List markets in the local snapshot, highest volume first."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        synced = last_synced_at(conn)
        if synced is None:
            typer.echo("No snapshot yet. Run: depmap catalog sync")
            return
        age_min = (time.time() * 1000 - synced) / 60_000
        rows = list_markets(conn, query=query)
        for r in rows[:limit]:
            question = (r.get("question") or "")[:70]
            typer.echo(f"  {r['market_id']:>10}  {r.get('volume') or 0:>14.0f}  {question}")
        typer.echo(f"Total: {len(rows)} markets (synced {age_min:.0f} min ago)")
    finally:
        conn.close()
