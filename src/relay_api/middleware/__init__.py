"""HTTP middleware for the gateway API."""
