"""Catalog and price-history providers (Polymarket Gamma + CLOB)."""
