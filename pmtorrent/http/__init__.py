"""
HTTP Client Module

Verifying download client for a pmtorrent server.
"""

from .client import HttpError, HttpResponse, PieceClient

__all__ = [
    "HttpError",
    "HttpResponse",
    "PieceClient",
]
