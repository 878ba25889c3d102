"""
Eagle File Server backend.

Read-only HTTP access to an Eagle media library: filtered listings, random
picks, and byte streaming of stored payloads.
"""
from .config import ServerConfig, load_config
from .deps import Services, build_services
from .server import FileServer

__all__ = ["FileServer", "ServerConfig", "Services", "build_services", "load_config"]
