"""DuckDB-backed catalog snapshot and price-history cache."""
