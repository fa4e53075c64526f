"""HTTP surface: thin FastAPI routers dispatching to services."""
