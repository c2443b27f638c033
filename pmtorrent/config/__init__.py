"""
Runtime Configuration Module

Provides configuration loading and management for pmtorrent.
"""

from .runtime import (
    ENV_PREFIX,
    ClientConfig,
    FileConfig,
    RuntimeConfig,
    ServerConfig,
    load_runtime_config,
)

__all__ = [
    "ENV_PREFIX",
    "ClientConfig",
    "FileConfig",
    "RuntimeConfig",
    "ServerConfig",
    "load_runtime_config",
]
