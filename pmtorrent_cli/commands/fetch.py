"""
CLI Fetch Command

Download every piece of a file from a pmtorrent server, verify each piece
against the file hash and write the result to disk.

Usage:
    pmtorrent fetch http://127.0.0.1:8080 <hash> --out path [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from pmtorrent.crypto.hashing import get_hasher
from pmtorrent.http.client import HttpError, PieceClient
from pmtorrent.schemas.errors import PieceVerificationError


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class FetchSummary:
    """Summary of a download for CLI output."""
    url: str = ""
    hash: str = ""
    out: str = ""
    bytes: int = 0
    ok: bool = False
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d["errors"]:
            del d["errors"]
        return d


def print_summary_human(summary: FetchSummary) -> None:
    """Print summary in human-readable format."""
    print(f"hash: {summary.hash}")
    print(f"from: {summary.url}")
    print(f"ok: {str(summary.ok).lower()}")
    if summary.ok:
        print(f"wrote {summary.bytes} bytes to {summary.out}")
    for err in summary.errors:
        print(f"  ✗ {err}")


def print_summary_json(summary: FetchSummary) -> None:
    """Print summary as JSON."""
    print(json.dumps(summary.to_dict(), indent=2))


def fetch_cmd(args: Namespace, client: PieceClient | None = None) -> int:
    """
    Execute the fetch command.

    Args:
        args: Parsed command-line arguments
        client: Pre-built client (a new PieceClient for args.url by default)

    Returns:
        Exit code (2 if a piece failed verification)
    """
    config = args.cli_config
    hasher_name = getattr(args, "hasher", None) or config.files.hasher
    timeout = getattr(args, "timeout", None) or config.client.timeout

    if client is None:
        client = PieceClient(args.url, timeout=timeout, hasher=get_hasher(hasher_name))

    summary = FetchSummary(url=args.url, hash=args.hash.lower(), out=args.out)
    exit_code = EXIT_SUCCESS

    try:
        data = client.download(args.hash)
    except PieceVerificationError as e:
        summary.errors.append(str(e))
        exit_code = EXIT_VERIFICATION_FAILED
    except (HttpError, ValueError) as e:
        # ValueError: malformed piece body (bad base64 or schema)
        summary.errors.append(str(e))
        exit_code = EXIT_RUNTIME_ERROR
    else:
        out = Path(args.out)
        try:
            out.write_bytes(data)
        except OSError as e:
            summary.errors.append(f"Cannot write {out}: {e}")
            exit_code = EXIT_RUNTIME_ERROR
        else:
            summary.ok = True
            summary.bytes = len(data)
            logger.info(f"Wrote {len(data)} bytes to {out}")

    if args.json:
        print_summary_json(summary)
    else:
        print_summary_human(summary)
        if not summary.ok:
            print(f"Error: download of {summary.hash} failed", file=sys.stderr)

    return exit_code
