"""
CLI Info Command

Chunk a file locally and report its hash (the Merkle root) and the shape
of its tree, as a server would publish it.

Usage:
    pmtorrent info path/to/file [--json] [--audit]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

from pmtorrent.crypto.hashing import encode_hex
from pmtorrent.files.file import File
from pmtorrent.schemas.errors import PMTorrentException
from pmtorrent_cli.config import file_config_from_args


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class InfoSummary:
    """Summary of a chunked file for CLI output."""
    path: str = ""
    hash: str = ""
    hasher: str = ""
    chunk_size: int = 0
    chunks: int = 0
    leaf_count: int = 0
    node_count: int = 0
    height: int = 0
    policy: str = ""
    tree_ok: Optional[bool] = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if self.tree_ok is None:
            del d["tree_ok"]
        return d


def summarize(path: str, file: File, audit: bool = False) -> InfoSummary:
    """Build an InfoSummary from a loaded File."""
    tree = file.tree
    summary = InfoSummary(
        path=path,
        hash=encode_hex(file.get_root()),
        hasher=file.hasher.name,
        chunk_size=file.chunk_size,
        chunks=file.get_size(),
        leaf_count=tree.leaf_count,
        node_count=tree.node_count,
        height=tree.height,
        policy=tree.policy.value,
    )
    if audit:
        summary.tree_ok = tree.verify_tree()
    return summary


def print_summary_human(summary: InfoSummary) -> None:
    """Print summary in human-readable format."""
    print(f"file: {summary.path}")
    print(f"hash: {summary.hash}")
    print(f"hasher: {summary.hasher}")
    print(f"chunk_size: {summary.chunk_size}")
    print(f"chunks: {summary.chunks}")
    print(f"leaves: {summary.leaf_count}")
    print(f"nodes: {summary.node_count}")
    print(f"height: {summary.height}")
    print(f"policy: {summary.policy}")
    if summary.tree_ok is not None:
        print(f"tree_ok: {str(summary.tree_ok).lower()}")


def print_summary_json(summary: InfoSummary) -> None:
    """Print summary as JSON."""
    print(json.dumps(summary.to_dict(), indent=2))


def info_cmd(args: Namespace) -> int:
    """
    Execute the info command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    path = Path(args.path)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        file_config = file_config_from_args(args.cli_config, args)
        file = File.from_path(path, **file_config.file_kwargs())
    except (PMTorrentException, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary = summarize(str(path), file, audit=args.audit)

    if args.json:
        print_summary_json(summary)
    else:
        print_summary_human(summary)

    if summary.tree_ok is False:
        return EXIT_VERIFICATION_FAILED
    return EXIT_SUCCESS
