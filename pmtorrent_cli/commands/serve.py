"""
CLI Serve Command

Chunk the given files, build a Merkle tree per file and serve pieces
with proofs over HTTP.

Usage:
    pmtorrent serve file1 [file2 ...] [--host HOST] [--port N]
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from typing import Iterable

from pmtorrent.config.runtime import FileConfig
from pmtorrent.files.file import File
from pmtorrent.repo import FileRepo
from pmtorrent.schemas.errors import PMTorrentException
from pmtorrent_cli.config import file_config_from_args


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def build_repo(paths: Iterable[str], file_config: FileConfig) -> FileRepo:
    """
    Load every path into a new repository.

    Raises:
        FileReadError: If a path cannot be read
        EmptyInputError: If a file is empty
        LeafCountError: If the policy rejects the file's chunk count
    """
    repo = FileRepo()
    kwargs = file_config.file_kwargs()
    for path in paths:
        hash_id = repo.add(File.from_path(path, **kwargs))
        print(f"{hash_id}  {path}")
    return repo


def serve_cmd(args: Namespace) -> int:
    """
    Execute the serve command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config = args.cli_config
    host = args.host or config.server.host
    port = args.port or config.server.port

    try:
        file_config = file_config_from_args(config, args)
        repo = build_repo(args.paths, file_config)
    except (PMTorrentException, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    import uvicorn
    from pmtorrent_api.app import create_app

    logger.info(f"Serving {len(repo)} file(s) on http://{host}:{port}")
    uvicorn.run(
        create_app(repo),
        host=host,
        port=port,
        log_level=config.log_level.lower(),
    )
    return EXIT_SUCCESS
