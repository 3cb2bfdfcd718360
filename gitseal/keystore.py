"""
Master key storage.

The master key is 32 random bytes kept in a single file readable only by
its owner. There is exactly one key per user account; losing the file
makes every file sealed with it permanently unrecoverable.

This module does NOT:
- derive cipher keys
- touch the filtered streams
"""

from __future__ import annotations

import os
import secrets
from pathlib import Path

from Crypto.Random import get_random_bytes

from .config import KEY_FILE_MODE, KEY_SIZE
from .errors import InvalidKeyError, KeyExistsError, KeyUnavailable, KeyWriteFailure


class KeyStore:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def exists(self) -> bool:
        return self.path.exists()

    def generate(self, overwrite: bool = False) -> bytes:
        """
        Create a new master key and persist it with owner-only permissions.

        A fresh key is created exclusively. With ``overwrite`` the key is
        written to a temporary file beside the old one and swapped in with
        ``os.replace``, so a failed write never leaves a truncated key.

        Args:
            overwrite: replace an existing key file instead of refusing

        Raises:
            KeyExistsError: if a key file exists and overwrite is False
            KeyWriteFailure: if the key cannot be written

        Returns:
            bytes: the new 32-byte key
        """

        key = get_random_bytes(KEY_SIZE)

        if not overwrite:
            _write_exclusive(self.path, key)
            return key

        tmp_path = self.path.with_name(f".{self.path.name}.{secrets.token_hex(8)}")
        _write_exclusive(tmp_path, key)
        try:
            os.replace(tmp_path, self.path)
        except OSError as e:
            _unlink_quietly(tmp_path)
            raise KeyWriteFailure(f"Could not write key: {e}") from e

        return key

    def load(self) -> bytes:
        """
        Read the master key.

        Raises:
            KeyUnavailable: if the file is missing or unreadable
            InvalidKeyError: if the file does not hold exactly 32 bytes

        Returns:
            bytes: the raw master key
        """

        try:
            key = self.path.read_bytes()
        except FileNotFoundError as e:
            raise KeyUnavailable(self.path) from e
        except OSError as e:
            raise KeyUnavailable(self.path, e.strerror or str(e)) from e

        if len(key) != KEY_SIZE:
            raise InvalidKeyError(
                self.path,
                f"expected {KEY_SIZE} bytes, found {len(key)}",
            )

        return key


# ---------------------------------------------------------------------------
# Filesystem helpers
# ---------------------------------------------------------------------------


def _write_exclusive(path: Path, data: bytes) -> None:
    """Create ``path`` (which must not exist) with mode 0600 and write ``data``."""
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, KEY_FILE_MODE)
    except FileExistsError as e:
        raise KeyExistsError(path) from e
    except OSError as e:
        raise KeyWriteFailure(f"Could not write key: {e}") from e

    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(path, KEY_FILE_MODE)
    except OSError as e:
        _unlink_quietly(path)
        raise KeyWriteFailure(f"Could not write key: {e}") from e


def _unlink_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
