"""Weather, location, summary and health endpoints."""
