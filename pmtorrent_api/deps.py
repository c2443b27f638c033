"""
API Dependencies

The FileRepo is built once at startup and stored on the application
state; handlers only read from it.
"""

from __future__ import annotations

from fastapi import Request

from pmtorrent.repo import FileRepo


def get_repo(request: Request) -> FileRepo:
    """Repository shared by all request handlers."""
    return request.app.state.repo
