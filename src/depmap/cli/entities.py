"""Entities subcommand: extract, index."""

from __future__ import annotations

import typer

from depmap.entities.extractor import extract_entities
from depmap.entities.linker import entity_index
from depmap.storage.catalog import load_catalog
from depmap.storage.db import get_connection, init_schema

app = typer.Typer(help="Named entities in market text")


@app.command("extract")
def extract(text: str = typer.Argument(..., help="Free text, e.g. a market question")) -> None:
    """Show the entities found in TEXT."""
    entities = extract_entities(text)
    for e in entities:
        typer.echo(f"  {e.type:<12} {e.name}")
    if not entities:
        typer.echo("No entities found.")


@app.command("index")
def index(
    ctx: typer.Context,
    top: int = typer.Option(25, "--top", "-n", help="Show the N most mentioned entities"),
) -> None:
    """Entity mention counts across the local catalog snapshot."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        events = load_catalog(conn)
    finally:
        conn.close()
    stats = entity_index(events)
    ranked = sorted(stats.items(), key=lambda kv: (-kv[1].count, kv[0]))
    for key, s in ranked[:top]:
        typer.echo(f"  {key:<24} {s.type:<12} {s.count:>5}  ({len(s.markets)} markets)")
    typer.echo(f"Total: {len(stats)} entities")
