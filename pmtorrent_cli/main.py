"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    pmtorrent serve <path>... [--host HOST] [--port N]
    pmtorrent info <path> [--json] [--chunk-size N] [--policy P] [--pad-to-pow2]
    pmtorrent fetch <url> <hash> --out PATH [--json]
    pmtorrent config --init | --show

Environment Variables:
    PMTORRENT_HOST / PMTORRENT_PORT   Server bind address (default: 127.0.0.1:8080)
    PMTORRENT_CHUNK_SIZE              Chunk size in bytes (default: 1024)
    PMTORRENT_ODD_POLICY              duplicate, promote or reject
    PMTORRENT_LOG_LEVEL               Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from pmtorrent.merkle.indexing import OddNodePolicy
from pmtorrent_cli.commands import fetch, info, serve
from pmtorrent_cli.config import get_default_config_template, load_config


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def _add_file_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Chunk size in bytes (default: from config or 1024)",
    )
    parser.add_argument(
        "--hasher",
        type=str,
        choices=["sha256", "emoji"],
        default=None,
        help="Hash function (default: sha256)",
    )
    parser.add_argument(
        "--policy",
        type=str,
        choices=[p.value for p in OddNodePolicy],
        default=None,
        help="Handling of an odd node count at a tree level (default: duplicate)",
    )
    parser.add_argument(
        "--pad-to-pow2",
        dest="pad_to_pow2",
        action="store_true",
        default=None,
        help="Pad the leaf level with filler hashes up to a power of two",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="pmtorrent",
        description="pmtorrent - serve file chunks with Merkle proofs and download them verified.",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s 0.1.0"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./pmtorrent.json or ~/.config/pmtorrent/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- serve command ---
    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve files over HTTP",
        description="Chunk the given files, build their Merkle trees and serve pieces with proofs.",
    )
    serve_parser.add_argument(
        "paths",
        nargs="+",
        type=str,
        help="Files to serve",
    )
    serve_parser.add_argument("--host", type=str, default=None, help="Bind host (default: 127.0.0.1)")
    serve_parser.add_argument("--port", "-p", type=int, default=None, help="Bind port (default: 8080)")
    _add_file_options(serve_parser)
    serve_parser.set_defaults(func=serve.serve_cmd)

    # --- info command ---
    info_parser = subparsers.add_parser(
        "info",
        help="Show the Merkle root and tree shape of a file",
        description="Chunk a file locally and print its hash (Merkle root) and tree statistics.",
    )
    info_parser.add_argument("path", type=str, help="File to inspect")
    info_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    info_parser.add_argument(
        "--audit",
        action="store_true",
        default=False,
        help="Re-check every internal node of the built tree",
    )
    _add_file_options(info_parser)
    info_parser.set_defaults(func=info.info_cmd)

    # --- fetch command ---
    fetch_parser = subparsers.add_parser(
        "fetch",
        help="Download a file and verify every piece",
        description="Download all pieces of a file and verify each one against the file hash.",
    )
    fetch_parser.add_argument("url", type=str, help="Server URL, e.g. http://127.0.0.1:8080")
    fetch_parser.add_argument("hash", type=str, help="File hash (Merkle root, hex)")
    fetch_parser.add_argument(
        "--out", "-o",
        type=str,
        required=True,
        help="Output file path",
    )
    fetch_parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    fetch_parser.add_argument(
        "--hasher",
        type=str,
        choices=["sha256", "emoji"],
        default=None,
        help="Hash function the server publishes with (default: sha256)",
    )
    fetch_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    fetch_parser.set_defaults(func=fetch.fetch_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="pmtorrent.json",
        help="Path for config file (default: pmtorrent.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("You can also use environment variables (PMTORRENT_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: pmtorrent config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
    except (OSError, ValueError, TypeError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if log_level.upper() == "DEBUG":
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
