"""Weather normalization, caching and stale-fallback core."""
