"""
Runtime Configuration

Central configuration for chunking, serving and downloading files.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from pmtorrent.crypto.hashing import Hasher, get_hasher
from pmtorrent.files.chunk import CHUNK_BYTES
from pmtorrent.merkle.indexing import OddNodePolicy

load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = "PMTORRENT_"


@dataclass
class ServerConfig:
    """Configuration for the HTTP server."""
    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class FileConfig:
    """How files are chunked and hashed into a tree."""
    chunk_size: int = CHUNK_BYTES
    hasher: str = "sha256"
    odd_policy: str = OddNodePolicy.DUPLICATE.value
    pad_to_pow2: bool = False

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        # Validate early so a bad config fails at load time
        self.odd_policy = OddNodePolicy(self.odd_policy).value
        get_hasher(self.hasher)

    def make_hasher(self) -> Hasher:
        return get_hasher(self.hasher)

    def file_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for the File constructors."""
        return {
            "chunk_size": self.chunk_size,
            "hasher": self.make_hasher(),
            "policy": OddNodePolicy(self.odd_policy),
            "pad_to_pow2": self.pad_to_pow2,
        }


@dataclass
class ClientConfig:
    """Configuration for the download client."""
    timeout: float = 30.0


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - JSON / YAML file (via from_dict / from_yaml)
    - Programmatic construction
    """
    server: ServerConfig = field(default_factory=ServerConfig)
    files: FileConfig = field(default_factory=FileConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - PMTORRENT_HOST / PMTORRENT_PORT: server bind address
        - PMTORRENT_CHUNK_SIZE: chunk size in bytes
        - PMTORRENT_HASHER: hasher name (sha256, emoji)
        - PMTORRENT_ODD_POLICY: duplicate, promote or reject
        - PMTORRENT_PAD_TO_POW2: pad leaves to a power of two (true/false)
        - PMTORRENT_CLIENT_TIMEOUT: client request timeout in seconds
        - PMTORRENT_LOG_LEVEL / PMTORRENT_LOG_FILE: logging
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}HOST"):
            overrides.setdefault("server", {})["host"] = os.getenv(f"{ENV_PREFIX}HOST")
        if os.getenv(f"{ENV_PREFIX}PORT"):
            overrides.setdefault("server", {})["port"] = int(os.getenv(f"{ENV_PREFIX}PORT"))

        if os.getenv(f"{ENV_PREFIX}CHUNK_SIZE"):
            overrides.setdefault("files", {})["chunk_size"] = int(os.getenv(f"{ENV_PREFIX}CHUNK_SIZE"))
        if os.getenv(f"{ENV_PREFIX}HASHER"):
            overrides.setdefault("files", {})["hasher"] = os.getenv(f"{ENV_PREFIX}HASHER")
        if os.getenv(f"{ENV_PREFIX}ODD_POLICY"):
            overrides.setdefault("files", {})["odd_policy"] = os.getenv(f"{ENV_PREFIX}ODD_POLICY")
        if os.getenv(f"{ENV_PREFIX}PAD_TO_POW2"):
            overrides.setdefault("files", {})["pad_to_pow2"] = _env_bool(
                os.getenv(f"{ENV_PREFIX}PAD_TO_POW2", "false")
            )

        if os.getenv(f"{ENV_PREFIX}CLIENT_TIMEOUT"):
            overrides.setdefault("client", {})["timeout"] = float(os.getenv(f"{ENV_PREFIX}CLIENT_TIMEOUT"))

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides["log_file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        server_data = data.get("server", {})
        files_data = data.get("files", {})
        client_data = data.get("client", {})

        return cls(
            server=ServerConfig(**server_data) if server_data else ServerConfig(),
            files=FileConfig(**files_data) if files_data else FileConfig(),
            client=ClientConfig(**client_data) if client_data else ClientConfig(),
            log_level=data.get("log_level", "INFO"),
            log_file=data.get("log_file"),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for section in ("server", "files", "client"):
            for key, value in overrides.get(section, {}).items():
                setattr(getattr(new_config, section), key, value)
        if "log_level" in overrides:
            new_config.log_level = overrides["log_level"]
        if "log_file" in overrides:
            new_config.log_file = overrides["log_file"]

        # re-run validation on the patched section
        new_config.files = FileConfig(**asdict(new_config.files))
        return new_config

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def default_config_paths() -> list[Path]:
    return [
        Path.cwd() / "pmtorrent.json",
        Path.cwd() / ".pmtorrent.json",
        Path.home() / ".config" / "pmtorrent" / "config.json",
    ]


def load_runtime_config(config_path: str | Path | None = None) -> RuntimeConfig:
    """
    Load RuntimeConfig from a config file, then overlay environment variables.

    An explicit path must exist. Without one, the first existing file of
    default_config_paths() is used. YAML is accepted for .yaml/.yml files.

    Environment variables ALWAYS override config file values.

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        candidates = [path]
    else:
        candidates = [p for p in default_config_paths() if p.exists()]

    config = RuntimeConfig()
    for path in candidates[:1]:
        if path.suffix in (".yaml", ".yml"):
            config = RuntimeConfig.from_yaml(path)
        else:
            with open(path) as f:
                config = RuntimeConfig.from_dict(json.load(f))
        logger.info(f"Loaded config from {path}")

    return config.with_env_overrides()
