"""
pmtorrent CLI

Command-line interface for serving and downloading verified files.

Usage:
    python -m pmtorrent_cli serve ./big.iso --port 8080
    python -m pmtorrent_cli info ./big.iso
    python -m pmtorrent_cli fetch http://127.0.0.1:8080 <hash> --out big.iso
    python -m pmtorrent_cli config --init
"""

__version__ = "0.1.0"
