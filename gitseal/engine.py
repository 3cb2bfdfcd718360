"""
Deterministic content transformation.

Files are sealed with AES-256 in full-block CFB mode using a key and IV
that are both derived from the master key:

    digest = SHA-256(master_key)
    key    = digest
    iv     = digest[:16]

The IV is fixed on purpose. With a random IV every committed version of a
file would look unrelated to the previous one and Git could no longer
diff, delta-compress or deduplicate it. With a fixed IV two plaintexts
that share a prefix produce ciphertexts sharing the same prefix, and
diverge from the first differing byte onward.

The price: anyone holding several ciphertexts made with the same key can
see where they share prefixes, and the keystream is reused across every
file. There is no authentication tag either, so flipped ciphertext bits
decrypt to corrupted plaintext without any error. Changing any of this
changes the on-disk format and breaks every repository already sealed.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import BinaryIO

from Crypto.Cipher import AES

from .config import AES_BLOCK_SIZE, CFB_SEGMENT_BITS, DEFAULT_CHUNK_SIZE
from .errors import CipherInitFailure
from .utils import iter_chunks, stable_hash, write_all


@dataclass(frozen=True)
class DerivedKeyMaterial:
    key: bytes
    iv: bytes


def derive_key_material(master_key: bytes) -> DerivedKeyMaterial:
    """Derive the AES key and fixed IV from the master key."""
    digest = stable_hash(master_key)
    return DerivedKeyMaterial(key=digest, iv=digest[:AES_BLOCK_SIZE])


class CipherEngine:
    def __init__(self, master_key: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.material = derive_key_material(master_key)
        self.chunk_size = chunk_size

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def new_cipher(self):
        """Return a fresh CFB cipher positioned at the start of a stream."""
        try:
            return AES.new(
                self.material.key,
                AES.MODE_CFB,
                iv=self.material.iv,
                segment_size=CFB_SEGMENT_BITS,
            )
        except (ValueError, TypeError) as e:
            raise CipherInitFailure(f"Cipher error: {e}") from e

    def transform(self, source: BinaryIO, sink: BinaryIO, encrypt: bool) -> int:
        """
        Stream ``source`` through the cipher into ``sink``.

        Only one chunk is held in memory at a time. Output written before
        an I/O failure is left in place.

        Returns:
            int: number of bytes processed
        """

        cipher = self.new_cipher()
        apply = cipher.encrypt if encrypt else cipher.decrypt

        total = 0
        for chunk in iter_chunks(source, self.chunk_size):
            write_all(sink, apply(chunk))
            total += len(chunk)
        return total

    def encrypt_stream(self, source: BinaryIO, sink: BinaryIO) -> int:
        return self.transform(source, sink, encrypt=True)

    def decrypt_stream(self, source: BinaryIO, sink: BinaryIO) -> int:
        return self.transform(source, sink, encrypt=False)

    def encrypt(self, data: bytes) -> bytes:
        out = io.BytesIO()
        self.encrypt_stream(io.BytesIO(data), out)
        return out.getvalue()

    def decrypt(self, data: bytes) -> bytes:
        out = io.BytesIO()
        self.decrypt_stream(io.BytesIO(data), out)
        return out.getvalue()
