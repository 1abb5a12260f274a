"""Shared fixtures for Encrypted Sessions tests."""
import pytest

from encrypted_sessions import EncryptedSessionHandler, MemoryStore

ENTROPY = (
    "k3Jd9qLx0Vb7TzR2mWc5Hn8Yp4Fs1Ga6Ue0Io9Pl3Kj7Mh2Ng5Bv8Cx4Dz1Aq6Sw0E"
)


@pytest.fixture
def entropy():
    """64+ characters of deployment entropy."""
    return ENTROPY


@pytest.fixture
def store():
    """Fresh in-memory store."""
    return MemoryStore()


@pytest.fixture
def handler(store, entropy):
    """Open handler over the in-memory store."""
    h = EncryptedSessionHandler(store, entropy=entropy)
    h.open("/tmp", "sess")
    yield h
    h.close()
