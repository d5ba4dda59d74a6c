"""Feed aggregation with a single-entry detail view."""
