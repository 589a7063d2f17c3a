"""CLI commands against a snapshot in a temporary DuckDB file."""

import json

from typer.testing import CliRunner

from depmap.cli.app import app
from depmap.storage.catalog import save_catalog
from depmap.storage.db import get_connection, init_schema

runner = CliRunner()


def _config_dir(tmp_path, sample_events, log_level="WARNING"):
    db = tmp_path / "cli.duckdb"
    text = f'[storage]\ndb_path = "{db.as_posix()}"\n'
    if log_level:
        text += f'\n[logging]\nlevel = "{log_level}"\n'
    (tmp_path / "default.toml").write_text(text)
    conn = get_connection(db)
    init_schema(conn)
    save_catalog(conn, sample_events)
    conn.close()
    return str(tmp_path)


def test_graph_build(tmp_path, sample_events):
    config_dir = _config_dir(tmp_path, sample_events)
    result = runner.invoke(app, ["-C", config_dir, "graph", "build", "m1", "--no-history"])
    assert result.exit_code == 0, result.output
    assert "Center: Will the Fed cut rates in March? (m1)" in result.output
    assert "Edges: 4" in result.output


def test_graph_build_unknown_market(tmp_path, sample_events):
    config_dir = _config_dir(tmp_path, sample_events)
    result = runner.invoke(app, ["-C", config_dir, "graph", "build", "nope", "--no-history"])
    assert result.exit_code == 1


def test_graph_clusters(tmp_path, sample_events):
    config_dir = _config_dir(tmp_path, sample_events)
    result = runner.invoke(app, ["-C", config_dir, "graph", "clusters"])
    assert result.exit_code == 0, result.output
    assert "2025-03-19  3 markets" in result.output


def test_catalog_list(tmp_path, sample_events):
    config_dir = _config_dir(tmp_path, sample_events)
    result = runner.invoke(app, ["-C", config_dir, "catalog", "list", "--query", "bitcoin"])
    assert result.exit_code == 0, result.output
    assert "Total: 1 markets" in result.output


def test_entities_extract():
    result = runner.invoke(app, ["entities", "extract", "Trump and the Fed"])
    assert result.exit_code == 0, result.output
    assert "Trump" in result.output
    assert "Fed" in result.output


def test_entities_index(tmp_path, sample_events):
    config_dir = _config_dir(tmp_path, sample_events)
    result = runner.invoke(app, ["-C", config_dir, "entities", "index"])
    assert result.exit_code == 0, result.output
    assert "fed" in result.output


def test_catalog_list_without_snapshot(tmp_path):
    (tmp_path / "default.toml").write_text(f'[storage]\ndb_path = "{(tmp_path / "empty.duckdb").as_posix()}"\n')
    result = runner.invoke(app, ["-C", str(tmp_path), "catalog", "list"])
    assert result.exit_code == 0, result.output
    assert "No snapshot yet" in result.output


def test_catalog_sync(tmp_path, sample_events, monkeypatch):
    config_dir = _config_dir(tmp_path, [])
    monkeypatch.setattr(
        "depmap.ingestion.polymarket.gamma.fetch_events", lambda base_url, limit, timeout: sample_events[:2]
    )
    result = runner.invoke(app, ["-C", config_dir, "catalog", "sync", "--limit", "2"])
    assert result.exit_code == 0, result.output
    assert "Synced 2 events, 4 markets." in result.output


def test_graph_build_json_at_default_log_level(tmp_path, sample_events):
    config_dir = _config_dir(tmp_path, sample_events, log_level=None)
    result = runner.invoke(app, ["-C", config_dir, "graph", "build", "m1", "--no-history", "--json"])
    assert result.exit_code == 0, result.output
    body = json.loads(result.stdout)
    assert body["graph"]["center_node_id"] == "m1"
    assert body["stats"]["total_edges"] == 4
