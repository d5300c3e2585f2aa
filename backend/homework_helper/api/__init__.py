"""HTTP API: dependencies and route modules."""
