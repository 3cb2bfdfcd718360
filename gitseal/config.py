"""
Global configuration and environment handling.

This module is responsible for:
- Defining global constants and defaults
- Resolving the master key location
- Providing normalized, ready-to-use configuration values

Nothing in this file should depend on:
- the cipher engine
- Git
- CLI parsing

If something here changes, previously encrypted content may become
unreadable. Treat the constants below as part of the on-disk format.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Optional

# ---------------------------------------------------------------------------
# Tool versioning
# ---------------------------------------------------------------------------

TOOL_VERSION: Final[str] = "0.1.0"

# ---------------------------------------------------------------------------
# Key / cipher format
# ---------------------------------------------------------------------------

KEY_FILE_NAME: Final[str] = ".git-seal.key"
KEY_SIZE: Final[int] = 32
KEY_FILE_MODE: Final[int] = 0o600

# AES-256 in full-block CFB mode
AES_BLOCK_SIZE: Final[int] = 16
CFB_SEGMENT_BITS: Final[int] = 128

# ---------------------------------------------------------------------------
# Default behavior
# ---------------------------------------------------------------------------

DEFAULT_CHUNK_SIZE: Final[int] = 64 * 1024
FILTER_NAME: Final[str] = "git-seal"
ATTRIBUTES_FILE: Final[str] = ".gitattributes"

# ---------------------------------------------------------------------------
# Environment variable names
# ---------------------------------------------------------------------------

ENV_KEY_FILE: Final[str] = "GIT_SEAL_KEY_FILE"


@dataclass
class SealConfig:
    key_path: Path
    chunk_size: int = DEFAULT_CHUNK_SIZE
    filter_name: str = FILTER_NAME


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def default_key_path() -> Path:
    """Return the conventional key location, ``~/.git-seal.key``."""
    return Path.home() / KEY_FILE_NAME


def resolve_key_path(explicit: Optional[str | Path] = None) -> Path:
    """
    Resolve the master key path.

    Precedence is: explicit argument, then ``GIT_SEAL_KEY_FILE``, then
    the per-user default.
    """

    if explicit:
        return Path(explicit).expanduser()

    from_env = os.getenv(ENV_KEY_FILE)
    if from_env:
        return Path(from_env).expanduser()

    return default_key_path()


def load_config(key_path: Optional[str | Path] = None) -> SealConfig:
    """
    Build the configuration for one invocation.

    Args:
        key_path: optional override for the key file location

    Returns:
        SealConfig
    """

    return SealConfig(key_path=resolve_key_path(key_path))
