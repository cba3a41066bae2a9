"""HTTP API for the cookbook assistant."""
