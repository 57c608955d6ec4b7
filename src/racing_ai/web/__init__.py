"""Debug HTTP API."""
