"""TOML config loading with profile overlay."""

from depmap.config import get_settings, load_config


def _write(path, text):
    path.write_text(text)


def test_profile_overlay_deep_merges(tmp_path):
    _write(tmp_path / "default.toml", '[storage]\ndb_path = "a.duckdb"\n\n[graph]\nmax_edges = 30\ntime_window = "24h"\n')
    _write(tmp_path / "dev.toml", "[graph]\nmax_edges = 5\n")
    raw = load_config("dev", tmp_path)
    assert raw["graph"] == {"max_edges": 5, "time_window": "24h"}
    assert raw["storage"]["db_path"] == "a.duckdb"


def test_missing_profile_and_defaults(tmp_path):
    _write(tmp_path / "default.toml", "[history]\nbatch_size = 7\n")
    settings = get_settings("nope", tmp_path)
    assert settings.history_batch_size == 7
    assert settings.history_cache_ttl_sec == 60
    assert settings.db_path == "data/depmap.duckdb"
    assert settings.logging_level == "INFO"


def test_no_config_dir_contents(tmp_path):
    assert load_config(None, tmp_path) == {}


def test_logs_go_to_stderr(capsys):
    import structlog

    from depmap.config import Settings, configure_logging

    configure_logging(Settings())
    try:
        structlog.get_logger("depmap.test").info("stderr_check", n=1)
        captured = capsys.readouterr()
        assert "stderr_check" in captured.err
        assert captured.out == ""
    finally:
        structlog.reset_defaults()
