"""Encrypted Sessions: Session payloads encrypted at rest, keyed by the session id.

Security Note (Threat Model):
    The storage backend only ever sees ciphertext under a storage key derived
    from the session id; neither the id nor the encryption key can be
    recovered from it. Compromising the store together with a live session
    id (or the process memory) exposes that session. This is an accepted
    limitation, as is the loss of every stored session when the entropy is
    rotated.
"""

from .version import __version__
from .config import HandlerConfig, generate_entropy
from .crypto import AuthenticatedCodec, CipherCodec, SUPPORTED_CIPHERS
from .exceptions import (
    EncryptedSessionError,
    ConfigurationError,
    AuthenticationFailure,
    StoreFailure,
    HandlerClosedError,
)
from .handler import EncryptedSessionHandler
from .keys import KeyDeriver, KeyPair, derive_keys, SUPPORTED_HASHES
from .storage import SessionStore, MemoryStore, FileStore

__all__ = [
    "__version__",
    "EncryptedSessionHandler",
    "HandlerConfig",
    "generate_entropy",
    "AuthenticatedCodec",
    "CipherCodec",
    "SUPPORTED_CIPHERS",
    "KeyDeriver",
    "KeyPair",
    "derive_keys",
    "SUPPORTED_HASHES",
    "SessionStore",
    "MemoryStore",
    "FileStore",
    "EncryptedSessionError",
    "ConfigurationError",
    "AuthenticationFailure",
    "StoreFailure",
    "HandlerClosedError",
]
