"""Polymarket Gamma (catalog) and CLOB (price history) clients."""
