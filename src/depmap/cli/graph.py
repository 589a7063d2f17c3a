"""Graph subcommand: build, leading, clusters."""

from __future__ import annotations

import asyncio
import json

import typer
from pydantic import ValidationError

from depmap.analysis.temporal import cluster_by_resolution_date, find_leading_indicators, market_end_date
from depmap.catalog import Catalog
from depmap.service import DependencyService, build_history_provider, filters_from_settings
from depmap.storage.catalog import load_catalog
from depmap.storage.db import get_connection, init_schema

app = typer.Typer(help="Dependency graph builds over the local catalog snapshot")


@app.command("build")
def build(
    ctx: typer.Context,
    market_id: str = typer.Argument(..., help="Center market ID"),
    dependency_type: str | None = typer.Option(
        None, "--type", "-t", help="all, structural, correlation, entity or temporal"
    ),
    time_window: str | None = typer.Option(None, "--window", "-w", help="1h, 24h or 7d"),
    threshold: float | None = typer.Option(None, "--threshold", help="Min |correlation|"),
    max_edges: int | None = typer.Option(None, "--max-edges", "-n", help="Max edges to keep"),
    same_event: bool = typer.Option(False, "--same-event", help="Apply the same-event filter rules"),
    min_shared_entities: int | None = typer.Option(None, "--min-entities", help="Min shared entities"),
    max_days_diff: float | None = typer.Option(None, "--max-days", help="Max resolution-date distance"),
    no_history: bool = typer.Option(False, "--no-history", help="Skip price-history fetch"),
    as_json: bool = typer.Option(False, "--json", help="Print graph and stats as JSON"),
) -> None:
    """Build the dependency graph around a market."""
    settings = ctx.obj["settings"]
    try:
        filters = filters_from_settings(
            settings,
            dependency_type=dependency_type,
            time_window=time_window,
            correlation_threshold=threshold,
            max_edges=max_edges,
            show_cross_event=False if same_event else None,
            min_shared_entities=min_shared_entities,
            max_days_diff=max_days_diff,
        )
    except ValidationError as e:
        raise typer.BadParameter(str(e)) from e
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        provider = None if no_history else build_history_provider(settings, conn)
        service = DependencyService(
            load_catalog(conn), provider, cross_event_market_count=settings.cross_event_history_count
        )
        result = asyncio.run(service.build(market_id, filters))
    finally:
        conn.close()
    if result.graph is None:
        typer.echo(f"Market not found: {market_id}", err=True)
        raise typer.Exit(code=1)
    if as_json:
        typer.echo(
            json.dumps(
                {"graph": result.graph.model_dump(mode="json"), "stats": result.stats.model_dump(mode="json")},
                indent=2,
            )
        )
        return
    nodes = {n.id: n for n in result.graph.nodes}
    center = nodes[result.graph.center_node_id]
    typer.echo(f"Center: {center.question} ({center.id})")
    for edge in result.graph.edges:
        other = nodes.get(edge.target_id)
        question = (other.question if other else edge.target_id)[:60]
        typer.echo(f"  {edge.type:<11} {edge.weight:5.2f}  {question}  - {edge.explanation}")
    counts = ", ".join(f"{k}={v}" for k, v in result.stats.by_type.items())
    typer.echo(f"Nodes: {result.stats.total_nodes}  Edges: {result.stats.total_edges} ({counts})")


@app.command("leading")
def leading(
    ctx: typer.Context,
    market_id: str = typer.Argument(..., help="Center market ID"),
    min_days: float = typer.Option(1.0, "--min-days", help="Resolve at least this many days earlier"),
    max_days: float = typer.Option(30.0, "--max-days", help="Resolve at most this many days earlier"),
    limit: int = typer.Option(20, "--limit", "-n"),
) -> None:
    """Markets resolving shortly before the center (potential leading indicators)."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        catalog = Catalog(load_catalog(conn))
    finally:
        conn.close()
    center = catalog.market(market_id)
    if center is None:
        typer.echo(f"Market not found: {market_id}", err=True)
        raise typer.Exit(code=1)
    edges = find_leading_indicators(
        market_id,
        market_end_date(center, catalog.event_for(market_id)),
        catalog,
        min_days_before=min_days,
        max_days_before=max_days,
    )
    for edge in edges[:limit]:
        target = catalog.market(edge.target_id)
        question = (target.question if target else edge.target_id)[:60]
        typer.echo(f"  {edge.weight:5.2f}  {question}  - {edge.explanation}")
    typer.echo(f"Total: {len(edges)} leading markets")


@app.command("clusters")
def clusters(
    ctx: typer.Context,
    tolerance_days: int = typer.Option(1, "--tolerance", help="Bucket width in days"),
    min_size: int = typer.Option(2, "--min-size", help="Hide clusters smaller than this"),
) -> None:
    """Group catalog markets by resolution date."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        events = load_catalog(conn)
    finally:
        conn.close()
    shown = 0
    for key, cluster in cluster_by_resolution_date(events, tolerance_days=tolerance_days).items():
        if len(cluster.markets) < min_size:
            continue
        shown += 1
        typer.echo(f"{key}  {len(cluster.markets)} markets")
        for market in cluster.markets[:5]:
            typer.echo(f"    {market.question[:70]}")
    typer.echo(f"Total: {shown} clusters")
