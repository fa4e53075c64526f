"""
Catalog API server.

Layered data access for categories, subcategories and products:
routers dispatch to services, services delegate to repositories,
repositories compose queries against a per-unit-of-work storage context.
"""

__version__ = "0.1.0"
