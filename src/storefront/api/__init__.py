"""API layer: root router, health endpoints and shared dependencies."""
