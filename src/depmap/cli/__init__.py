"""Typer CLI (entry point: depmap)."""
