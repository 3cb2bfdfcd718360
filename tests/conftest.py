import pytest

from gitseal.keystore import KeyStore


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.git-seal.key."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("GIT_SEAL_KEY_FILE", raising=False)
    return home


@pytest.fixture
def master_key():
    return bytes(range(32))


@pytest.fixture
def key_path(tmp_path):
    return tmp_path / ".git-seal.key"


@pytest.fixture
def keystore(key_path):
    return KeyStore(key_path)


@pytest.fixture
def loaded_keystore(keystore, master_key):
    keystore.path.write_bytes(master_key)
    return keystore
