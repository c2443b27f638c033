"""
FastAPI Application

Main application setup and configuration.

Usage:
    pmtorrent serve path/to/file --port 8080

    # Or programmatically
    app = create_app(repo)
    uvicorn.run(app, host="127.0.0.1", port=8080)
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pmtorrent.repo import FileRepo
from pmtorrent_api.errors import APIError, api_error_handler, generic_error_handler
from pmtorrent_api.routes import health, pieces


logger = logging.getLogger(__name__)


# Respects PMTORRENT_LOG_LEVEL env var and pmtorrent.json log_level
def _resolve_log_level() -> int:
    """Resolve log level from env var or pmtorrent.json, defaulting to INFO."""
    raw = os.getenv("PMTORRENT_LOG_LEVEL")
    if raw is None:
        cfg_path = Path.cwd() / "pmtorrent.json"
        if cfg_path.exists():
            try:
                with open(cfg_path) as f:
                    raw = json.load(f).get("log_level")
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to read log level from {cfg_path}: {e}")
    return getattr(logging, (raw or "INFO").upper(), logging.INFO)


logging.basicConfig(
    level=_resolve_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app(repo: Optional[FileRepo] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        repo: Files to serve; an empty repository when omitted
    """

    app = FastAPI(
        title="pmtorrent API",
        description="""
Serves file chunks ("pieces") together with Merkle inclusion proofs.

## Endpoints

- **GET /hashes** - List served files (hash, piece count, leaf count, chunk size)
- **GET /piece/{hash_id}/{piece_idx}** - One piece (base64) with its proof
- **GET /health** - Health check

## Verification

A file's hash is the root of the Merkle tree over its chunks. Clients
recompute the root from each piece and its proof and compare it with the
hash they obtained from the listing.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.repo = repo if repo is not None else FileRepo()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    app.include_router(health.router)
    app.include_router(pieces.router)

    return app
