"""depmap - market dependency graph engine for prediction-market dashboards."""

__version__ = "0.1.0"
