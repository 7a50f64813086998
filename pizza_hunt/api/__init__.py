"""
API module with the pizza, comment and utility routers.
"""

from .routes import pizza_router, comment_router, router, get_store

__all__ = ["pizza_router", "comment_router", "router", "get_store"]
