"""
pmtorrent HTTP API (FastAPI)

Serves file listings and individual pieces with their inclusion proofs:
- GET /hashes - List served files
- GET /piece/{hash_id}/{piece_idx} - One piece with its proof
- GET /health - Health check

Usage:
    pmtorrent serve path/to/file
"""

__version__ = "0.1.0"
