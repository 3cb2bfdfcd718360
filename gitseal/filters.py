"""
Git clean/smudge filter entry points.

Git pipes file content through ``clean`` on its way into the repository
and through ``smudge`` on its way out to the working tree.
"""

from __future__ import annotations

from typing import BinaryIO

from .config import DEFAULT_CHUNK_SIZE
from .engine import CipherEngine
from .errors import KeyUnavailable
from .keystore import KeyStore
from .utils import copy_stream


def clean(
    keystore: KeyStore,
    source: BinaryIO,
    sink: BinaryIO,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Encrypt working-tree content for storage. A missing key is fatal."""
    engine = CipherEngine(keystore.load(), chunk_size)
    return engine.encrypt_stream(source, sink)


def smudge(
    keystore: KeyStore,
    source: BinaryIO,
    sink: BinaryIO,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> bool:
    """
    Decrypt stored content for the working tree.

    Without a usable key the content is passed through unchanged, so Git
    checks out the sealed bytes instead of failing the checkout.

    Returns:
        bool: True if the content was decrypted, False on passthrough
    """

    try:
        master_key = keystore.load()
    except KeyUnavailable:
        copy_stream(source, sink, chunk_size)
        return False

    CipherEngine(master_key, chunk_size).decrypt_stream(source, sink)
    return True
