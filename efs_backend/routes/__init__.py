"""
HTTP surface for Eagle File Server.
Importing this package is side-effect free; route registration is explicit.
"""
from .registry import CORS_HEADERS, create_app, register_all_routes

__all__ = ["CORS_HEADERS", "create_app", "register_all_routes"]
