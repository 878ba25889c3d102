"""Route handler registration functions."""
from .files import register_file_routes
from .info import register_fallback_routes, register_info_routes
from .listing import register_listing_routes
from .random_item import register_random_routes

__all__ = [
    "register_fallback_routes",
    "register_file_routes",
    "register_info_routes",
    "register_listing_routes",
    "register_random_routes",
]
