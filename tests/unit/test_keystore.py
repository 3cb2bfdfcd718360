import errno
import os
import stat
from unittest.mock import patch

import pytest

from gitseal.errors import (
    InvalidKeyError,
    KeyExistsError,
    KeyUnavailable,
    KeyWriteFailure,
)
from gitseal.keystore import KeyStore

posix_only = pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")


def mode_of(path):
    return stat.S_IMODE(path.stat().st_mode)


# ==============================================================================
# Tests: generate
# ==============================================================================

def test_generate_writes_32_bytes(keystore):
    key = keystore.generate()

    assert len(key) == 32
    assert keystore.path.read_bytes() == key


def test_generate_uses_secure_random_source(keystore):
    fixed = b"\x01" * 32
    with patch("gitseal.keystore.get_random_bytes", return_value=fixed) as rng:
        key = keystore.generate()

    rng.assert_called_once_with(32)
    assert key == fixed
    assert keystore.path.read_bytes() == fixed


@posix_only
def test_generate_restricts_permissions_to_owner(keystore):
    keystore.generate()
    assert mode_of(keystore.path) == 0o600


def test_generate_refuses_to_overwrite(keystore):
    original = keystore.generate()

    with pytest.raises(KeyExistsError, match="already exists"):
        keystore.generate()

    assert keystore.path.read_bytes() == original


def test_key_exists_error_is_a_write_failure(keystore):
    keystore.generate()
    with pytest.raises(KeyWriteFailure):
        keystore.generate()


@posix_only
def test_generate_overwrite_replaces_key_and_resets_mode(keystore):
    keystore.path.write_bytes(b"\x00" * 32)
    os.chmod(keystore.path, 0o644)

    key = keystore.generate(overwrite=True)

    assert keystore.path.read_bytes() == key
    assert key != b"\x00" * 32
    assert mode_of(keystore.path) == 0o600


def test_generate_reports_write_failure(tmp_path):
    store = KeyStore(tmp_path / "missing-dir" / ".git-seal.key")

    with pytest.raises(KeyWriteFailure, match="Could not write key"):
        store.generate()


# ==============================================================================
# Tests: load
# ==============================================================================

def test_load_returns_generated_key(keystore):
    key = keystore.generate()
    assert keystore.load() == key


def test_load_missing_key(keystore):
    with pytest.raises(KeyUnavailable, match="Run 'git-seal keygen' first") as exc:
        keystore.load()

    assert not isinstance(exc.value, InvalidKeyError)
    assert exc.value.path == keystore.path


def test_load_unreadable_path(tmp_path):
    directory = tmp_path / "not-a-file"
    directory.mkdir()

    with pytest.raises(KeyUnavailable):
        KeyStore(directory).load()


@pytest.mark.parametrize("size", [0, 16, 31, 33, 64])
def test_load_rejects_wrong_length(keystore, size):
    keystore.path.write_bytes(b"k" * size)

    with pytest.raises(InvalidKeyError, match=f"found {size}"):
        keystore.load()


def test_invalid_key_is_key_unavailable(keystore):
    keystore.path.write_bytes(b"")
    with pytest.raises(KeyUnavailable):
        keystore.load()


def test_exists(keystore):
    assert keystore.exists() is False
    keystore.generate()
    assert keystore.exists() is True


# ==============================================================================
# Tests: Failed writes never damage an existing key
# ==============================================================================

@pytest.fixture
def key_dir(tmp_path):
    directory = tmp_path / "keys"
    directory.mkdir()
    return directory


def failing_fsync(fd):
    raise OSError(errno.ENOSPC, "No space left on device")


def test_failed_fresh_write_leaves_no_partial_file(key_dir):
    store = KeyStore(key_dir / ".git-seal.key")

    with patch("gitseal.keystore.os.fsync", side_effect=failing_fsync):
        with pytest.raises(KeyWriteFailure, match="No space left"):
            store.generate()

    assert list(key_dir.iterdir()) == []
    assert store.exists() is False


def test_retry_after_failed_write_succeeds(key_dir):
    store = KeyStore(key_dir / ".git-seal.key")

    with patch("gitseal.keystore.os.fsync", side_effect=failing_fsync):
        with pytest.raises(KeyWriteFailure):
            store.generate()

    key = store.generate()
    assert store.load() == key


def test_failed_overwrite_keeps_previous_key(key_dir, master_key):
    store = KeyStore(key_dir / ".git-seal.key")
    store.path.write_bytes(master_key)

    with patch("gitseal.keystore.os.fsync", side_effect=failing_fsync):
        with pytest.raises(KeyWriteFailure):
            store.generate(overwrite=True)

    assert store.path.read_bytes() == master_key
    assert [p.name for p in key_dir.iterdir()] == [".git-seal.key"]


def test_failed_replace_keeps_previous_key(key_dir, master_key):
    store = KeyStore(key_dir / ".git-seal.key")
    store.path.write_bytes(master_key)

    with patch("gitseal.keystore.os.replace", side_effect=OSError(errno.EXDEV, "Cross-device link")):
        with pytest.raises(KeyWriteFailure, match="Cross-device link"):
            store.generate(overwrite=True)

    assert store.path.read_bytes() == master_key
    assert [p.name for p in key_dir.iterdir()] == [".git-seal.key"]


def test_overwrite_leaves_only_the_key_file(key_dir, master_key):
    store = KeyStore(key_dir / ".git-seal.key")
    store.path.write_bytes(master_key)

    key = store.generate(overwrite=True)

    assert store.load() == key
    assert [p.name for p in key_dir.iterdir()] == [".git-seal.key"]


def test_directory_at_key_path_counts_as_existing(key_dir):
    store = KeyStore(key_dir / ".git-seal.key")
    store.path.mkdir()

    assert store.exists() is True
    with pytest.raises(KeyExistsError):
        store.generate()
