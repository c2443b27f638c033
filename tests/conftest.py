"""
Pytest configuration and shared fixtures for pmtorrent tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import os
import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_leaves = _common.make_leaves
make_data = _common.make_data
make_file = _common.make_file
make_repo = _common.make_repo


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def four_leaves():
    """Four distinct leaf digests."""
    return make_leaves(4)


@pytest.fixture
def sample_file():
    """A File of 3 full chunks and one short chunk."""
    return make_file()


@pytest.fixture
def sample_repo(sample_file):
    """A FileRepo serving sample_file."""
    return make_repo(sample_file)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove PMTORRENT_* variables and run from an empty directory."""
    for key in list(os.environ):
        if key.startswith("PMTORRENT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
