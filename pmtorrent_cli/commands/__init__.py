"""
CLI command modules.
"""

from pmtorrent_cli.commands import serve, info, fetch

__all__ = ["serve", "info", "fetch"]
