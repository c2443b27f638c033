"""API route handlers."""

from pmtorrent_api.routes import health, pieces

__all__ = ["health", "pieces"]
