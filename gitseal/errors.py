"""
Error types raised by git-seal.

Library modules raise these; only the CLI turns them into a
diagnostic on stderr and a non-zero exit status.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class SealError(Exception):
    """Base class for all git-seal failures."""


class KeyUnavailable(SealError):
    """The master key file is missing or unreadable."""

    def __init__(self, path: Path, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f"Key not found at {path}. Run 'git-seal keygen' first."
        if reason:
            message = f"Key unavailable at {path}: {reason}"
        super().__init__(message)


class InvalidKeyError(KeyUnavailable):
    """The key file exists but does not hold a valid master key."""


class KeyWriteFailure(SealError):
    """A newly generated key could not be persisted."""


class KeyExistsError(KeyWriteFailure):
    """Refused to replace an existing key file."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            f"Key already exists at {path}. "
            "Overwriting it makes everything encrypted with it unrecoverable; "
            "use --force if you really mean it."
        )


class CipherInitFailure(SealError):
    """The cipher could not be initialized from the derived key material."""


class StreamIOFailure(SealError):
    """Reading or writing the filtered stream failed."""


class GitConfigError(SealError):
    """Registering the filter with Git failed."""
