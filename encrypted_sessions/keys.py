"""
Key Derivation: Encryption and storage keys from the session identifier.

The session identifier is treated as secret key material. Two HMAC rounds
keyed by the identifier produce:

- ``enc_key``: HMAC(id, entropy), raw digest, used as codec key material.
- ``storage_key``: HMAC(id, enc_key), base64 encoded, reduced to 26
  alphanumeric characters, used as the opaque lookup key in the store.

Security Note:
    Never log the session id, the entropy or ``enc_key``. The storage key is
    safe to log: it reveals neither the identifier nor the encryption key.
"""
import re
import base64
from typing import NamedTuple, Union

from cryptography.hazmat.primitives import hashes, hmac

from .exceptions import ConfigurationError

STORAGE_KEY_LENGTH = 26

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")

# digests under 28 bytes (md5, sha1) cannot reliably keep 26 alphanumerics
# after base64 encoding, so they are not offered
SUPPORTED_HASHES: dict[str, type[hashes.HashAlgorithm]] = {
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha512_256": hashes.SHA512_256,
    "sha3_224": hashes.SHA3_224,
    "sha3_256": hashes.SHA3_256,
    "sha3_384": hashes.SHA3_384,
    "sha3_512": hashes.SHA3_512,
}

_BY_COMPACT = {name.replace("_", ""): name for name in SUPPORTED_HASHES}


class KeyPair(NamedTuple):
    """Keys derived for a single operation. Never cached or persisted."""

    enc_key: bytes
    storage_key: str

    def __repr__(self) -> str:
        return f"KeyPair(enc_key=<{len(self.enc_key)} bytes>, storage_key={self.storage_key!r})"


def normalize_hash_name(name: str) -> str:
    """Canonical registry spelling, e.g. ``SHA-256`` -> ``sha256``, ``sha3-512`` -> ``sha3_512``."""
    compact = name.strip().lower().replace("-", "").replace("_", "")
    return _BY_COMPACT.get(compact, name.strip().lower())


def get_hash(name: str) -> hashes.HashAlgorithm:
    """Return a hash algorithm instance for an identifier.

    Args:
        name: Hash identifier, e.g. ``"sha256"`` or ``"SHA3-512"``.

    Returns:
        A ``cryptography`` hash algorithm instance.

    Raises:
        ConfigurationError: If the hash is not in ``SUPPORTED_HASHES``.
    """
    canonical = normalize_hash_name(name)
    try:
        return SUPPORTED_HASHES[canonical]()
    except KeyError:
        raise ConfigurationError(
            f"Unsupported hash algorithm: {name!r} "
            f"(supported: {', '.join(sorted(SUPPORTED_HASHES))})"
        ) from None


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def _hmac(algorithm: hashes.HashAlgorithm, key: bytes, message: bytes) -> bytes:
    mac = hmac.HMAC(key, algorithm)
    mac.update(message)
    return mac.finalize()


def derive_keys(
    session_id: Union[str, bytes],
    entropy: Union[str, bytes],
    algorithm: hashes.HashAlgorithm,
) -> KeyPair:
    """Derive the encryption and storage keys for a session.

    Deterministic and side-effect free: identical inputs always give the same
    pair, and nothing is retained between calls.

    Args:
        session_id: The secret session identifier.
        entropy: Deployment-wide secret, at least 64 characters.
        algorithm: Hash used for both HMAC rounds (see ``get_hash``).

    Returns:
        KeyPair with the raw ``enc_key`` and the 26 character ``storage_key``.
    """
    secret = _to_bytes(session_id)
    enc_key = _hmac(algorithm, secret, _to_bytes(entropy))
    storage_raw = _hmac(algorithm, secret, enc_key)
    encoded = base64.b64encode(storage_raw).decode("ascii")
    storage_key = _NON_ALNUM.sub("", encoded)[:STORAGE_KEY_LENGTH]
    return KeyPair(enc_key=enc_key, storage_key=storage_key)


class KeyDeriver:
    """Binds the entropy and hash once; derives key pairs per session id.

    The hash is resolved eagerly so an unsupported identifier fails at
    construction, never during derivation.
    """

    __slots__ = ("_entropy", "_algorithm")

    def __init__(self, entropy: Union[str, bytes], hash_algorithm: str = "sha256") -> None:
        self._algorithm = get_hash(hash_algorithm)
        self._entropy = _to_bytes(entropy)

    @property
    def algorithm(self) -> hashes.HashAlgorithm:
        return self._algorithm

    def derive(self, session_id: Union[str, bytes]) -> KeyPair:
        return derive_keys(session_id, self._entropy, self._algorithm)

    def __repr__(self) -> str:
        return f"<KeyDeriver hash={self._algorithm.name}>"
