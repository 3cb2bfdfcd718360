"""
Shared utility helpers.

This module contains small, reusable helpers that do not belong
to key management, cipher setup, or command orchestration.
"""

from __future__ import annotations

import hashlib
import shutil
from typing import BinaryIO, Iterator

from .errors import StreamIOFailure


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------


def stable_hash(data: bytes) -> bytes:
    """Return a stable SHA-256 hash of arbitrary bytes."""
    return hashlib.sha256(data).digest()


def short_hash(data: bytes, length: int = 8) -> str:
    """Return a short hex hash useful for fingerprints."""
    return hashlib.sha256(data).hexdigest()[:length]


# ---------------------------------------------------------------------------
# Stream helpers
# ---------------------------------------------------------------------------


def iter_chunks(source: BinaryIO, size: int) -> Iterator[bytes]:
    """Yield successive reads of at most ``size`` bytes until EOF."""
    while True:
        try:
            chunk = source.read(size)
        except OSError as e:
            raise StreamIOFailure(f"Stream error: {e}") from e
        if not chunk:
            return
        yield chunk


def write_all(sink: BinaryIO, data: bytes) -> None:
    """Write bytes to a sink, mapping I/O errors to StreamIOFailure."""
    try:
        sink.write(data)
    except OSError as e:
        raise StreamIOFailure(f"Stream error: {e}") from e


def copy_stream(source: BinaryIO, sink: BinaryIO, size: int) -> None:
    """Copy a stream unchanged with bounded memory."""
    try:
        shutil.copyfileobj(source, sink, size)
    except OSError as e:
        raise StreamIOFailure(f"Stream error: {e}") from e
