"""HTTP client layer for remote services."""
