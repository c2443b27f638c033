"""
CLI Configuration

Resolves the runtime configuration for a CLI invocation: config file,
then environment variables, then command-line flags.
"""

from __future__ import annotations

import json
from argparse import Namespace
from dataclasses import replace
from pathlib import Path

from pmtorrent.config.runtime import FileConfig, RuntimeConfig, load_runtime_config


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional explicit path to a config file (.json or .yaml)

    Returns:
        Merged configuration
    """
    return load_runtime_config(config_path)


def file_config_from_args(config: RuntimeConfig, args: Namespace) -> FileConfig:
    """Apply --chunk-size / --hasher / --policy / --pad-to-pow2 flags."""
    overrides = {}
    if getattr(args, "chunk_size", None) is not None:
        overrides["chunk_size"] = args.chunk_size
    if getattr(args, "hasher", None) is not None:
        overrides["hasher"] = args.hasher
    if getattr(args, "policy", None) is not None:
        overrides["odd_policy"] = args.policy
    if getattr(args, "pad_to_pow2", None) is not None:
        overrides["pad_to_pow2"] = args.pad_to_pow2
    return replace(config.files, **overrides)


def get_default_config_template() -> str:
    """Get a template configuration file."""
    template = {
        "server": {
            "host": "127.0.0.1",
            "port": 8080,
        },
        "files": {
            "chunk_size": 1024,
            "hasher": "sha256",
            "odd_policy": "duplicate",
            "pad_to_pow2": False,
        },
        "client": {
            "timeout": 30.0,
        },
        "log_level": "INFO",
        "log_file": None,
    }
    return json.dumps(template, indent=2) + "\n"
