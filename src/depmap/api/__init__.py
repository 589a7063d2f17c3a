"""HTTP read API for the dependency map."""
