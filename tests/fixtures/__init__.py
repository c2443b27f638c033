"""
Test fixtures package for pmtorrent tests.

This package provides factory functions for creating test objects:
- common.py: leaf digests, file contents, Files and repositories

Usage:
    from fixtures import make_leaves, make_file

    def test_something():
        tree = build(make_leaves(5))
"""

from .common import (
    make_data,
    make_file,
    make_leaves,
    make_repo,
    reference_root,
)

__all__ = [
    "make_data",
    "make_file",
    "make_leaves",
    "make_repo",
    "reference_root",
]
