"""
git-seal

Transparent encryption for Git. Files are stored encrypted in the
repository through a clean/smudge filter and appear as plaintext in the
working tree.
"""

__version__ = "0.1.0"

from .config import load_config, SealConfig
from .engine import CipherEngine, DerivedKeyMaterial, derive_key_material
from .errors import (
    SealError,
    KeyUnavailable,
    InvalidKeyError,
    KeyWriteFailure,
    KeyExistsError,
    CipherInitFailure,
    StreamIOFailure,
    GitConfigError,
)
from .keystore import KeyStore

__all__ = [
    "load_config",
    "SealConfig",
    "CipherEngine",
    "DerivedKeyMaterial",
    "derive_key_material",
    "KeyStore",
    "SealError",
    "KeyUnavailable",
    "InvalidKeyError",
    "KeyWriteFailure",
    "KeyExistsError",
    "CipherInitFailure",
    "StreamIOFailure",
    "GitConfigError",
]
