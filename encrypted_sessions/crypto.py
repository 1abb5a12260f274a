"""
Session Crypto Core: Authenticated encryption under a per-call key.

The codec never stores a key: every ``encrypt``/``decrypt`` receives the key
derived for that session, so concurrent operations on different sessions
cannot observe each other's key material.

Blob formats:
- AEAD ciphers (GCM, ChaCha20-Poly1305): [nonce 12B][encrypted_payload + tag 16B]
- Encrypt-then-MAC ciphers (CBC, CTR): [iv 16B][encrypted_payload][HMAC tag]

The caller key is expanded with HKDF into a cipher sub-key (and a MAC sub-key
for encrypt-then-MAC), with the cipher name as context for domain separation.

Security Note:
    Never log plaintext, ciphertext or key values.
    Nonces are random 96-bit; collision probability negligible under normal usage.
"""
import os
import random
import logging
from typing import Callable, Protocol, runtime_checkable

from cryptography.exceptions import InvalidSignature, InvalidTag
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from .exceptions import AuthenticationFailure, ConfigurationError
from .keys import get_hash

logger = logging.getLogger("encrypted_sessions")

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16  # GCM / Poly1305 tag
IV_SIZE = 16  # AES block
BLOCK_BITS = 128

# cipher name -> (AEAD class, key length)
AEAD_CIPHERS: dict[str, tuple[type, int]] = {
    "aes-128-gcm": (AESGCM, 16),
    "aes-256-gcm": (AESGCM, 32),
    "chacha20-poly1305": (ChaCha20Poly1305, 32),
}

# cipher name -> (mode class, key length)
BLOCK_CIPHERS: dict[str, tuple[type, int]] = {
    "aes-128-cbc": (modes.CBC, 16),
    "aes-256-cbc": (modes.CBC, 32),
    "aes-128-ctr": (modes.CTR, 16),
    "aes-256-ctr": (modes.CTR, 32),
}

SUPPORTED_CIPHERS = frozenset(AEAD_CIPHERS) | frozenset(BLOCK_CIPHERS)


@runtime_checkable
class AuthenticatedCodec(Protocol):
    """Encrypts and decrypts payloads under a caller-supplied key.

    ``decrypt`` must verify integrity before returning anything and raise
    ``AuthenticationFailure`` on mismatch. Implementations keep no key state
    between calls.
    """

    def encrypt(self, plaintext: bytes, key: bytes) -> bytes: ...

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes: ...


def normalize_cipher_name(name: str) -> str:
    """Canonical cipher spelling: lower case, ``_`` replaced by ``-``."""
    return name.strip().lower().replace("_", "-")


def resolve_random_source(allow_weak_rand: bool = False) -> Callable[[int], bytes]:
    """Return the byte source used for nonces and IVs.

    Args:
        allow_weak_rand: Accept a non-cryptographic generator when the
            platform offers no strong source.

    Returns:
        Callable taking a size and returning that many random bytes.

    Raises:
        ConfigurationError: If no strong source exists and weak randomness
            is not allowed.
    """
    try:
        os.urandom(1)
    except NotImplementedError:
        if not allow_weak_rand:
            raise ConfigurationError(
                "No cryptographically strong randomness source available"
            ) from None
        logger.warning(
            "No strong randomness source available, falling back to a weak generator"
        )
        return random.randbytes
    return os.urandom


class CipherCodec:
    """Default ``AuthenticatedCodec`` backed by ``cryptography``.

    Args:
        cipher: Cipher identifier, see ``SUPPORTED_CIPHERS``.
        hash_algorithm: Hash for HKDF key expansion and HMAC tags.
        allow_weak_rand: Passed to ``resolve_random_source``.

    Raises:
        ConfigurationError: On an unsupported cipher, hash or randomness source.
    """

    def __init__(
        self,
        cipher: str = "aes-256-gcm",
        hash_algorithm: str = "sha256",
        allow_weak_rand: bool = False,
    ) -> None:
        self._cipher = normalize_cipher_name(cipher)
        if self._cipher not in SUPPORTED_CIPHERS:
            raise ConfigurationError(
                f"Unsupported cipher: {cipher!r} "
                f"(supported: {', '.join(sorted(SUPPORTED_CIPHERS))})"
            )
        self._algorithm = get_hash(hash_algorithm)
        self._random = resolve_random_source(allow_weak_rand)
        self._aead = self._cipher in AEAD_CIPHERS

    @property
    def cipher(self) -> str:
        return self._cipher

    @property
    def algorithm(self) -> hashes.HashAlgorithm:
        return self._algorithm

    def __repr__(self) -> str:
        return f"<CipherCodec cipher={self._cipher} hash={self._algorithm.name}>"

    # ------------------------------------------------------------------
    # Key expansion
    # ------------------------------------------------------------------

    def _expand(self, key: bytes, length: int, purpose: str) -> bytes:
        """Derive a sub-key of ``length`` bytes from the caller key."""
        hkdf = HKDF(
            algorithm=self._algorithm,
            length=length,
            salt=None,  # deterministic: same session key, same sub-keys
            info=f"{self._cipher}:{purpose}".encode("utf-8"),
        )
        return hkdf.derive(key)

    def _tag(self, mac_key: bytes, data: bytes) -> hmac.HMAC:
        mac = hmac.HMAC(mac_key, self._algorithm)
        mac.update(data)
        return mac

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def encrypt(self, plaintext: bytes, key: bytes) -> bytes:
        """Encrypt and authenticate ``plaintext`` under ``key``.

        Args:
            plaintext: Data to encrypt, may be empty.
            key: Per-session key material.

        Returns:
            Opaque ciphertext blob.
        """
        if self._aead:
            return self._encrypt_aead(plaintext, key)
        return self._encrypt_block(plaintext, key)

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        """Verify and decrypt a blob produced by ``encrypt``.

        Args:
            ciphertext: Blob as returned by ``encrypt``.
            key: Per-session key material.

        Returns:
            Decrypted plaintext bytes.

        Raises:
            AuthenticationFailure: If the blob is malformed, tampered with or
                encrypted under a different key.
        """
        if self._aead:
            return self._decrypt_aead(bytes(ciphertext), key)
        return self._decrypt_block(bytes(ciphertext), key)

    # ------------------------------------------------------------------
    # AEAD
    # ------------------------------------------------------------------

    def _encrypt_aead(self, plaintext: bytes, key: bytes) -> bytes:
        cipher_cls, key_length = AEAD_CIPHERS[self._cipher]
        cipher = cipher_cls(self._expand(key, key_length, "cipher"))
        nonce = self._random(NONCE_SIZE)
        return nonce + cipher.encrypt(nonce, plaintext, None)

    def _decrypt_aead(self, ciphertext: bytes, key: bytes) -> bytes:
        _min = NONCE_SIZE + TAG_SIZE
        if len(ciphertext) < _min:
            raise AuthenticationFailure(
                f"Ciphertext too short: {len(ciphertext)} bytes (minimum {_min})"
            )
        cipher_cls, key_length = AEAD_CIPHERS[self._cipher]
        cipher = cipher_cls(self._expand(key, key_length, "cipher"))
        nonce = ciphertext[:NONCE_SIZE]
        try:
            return cipher.decrypt(nonce, ciphertext[NONCE_SIZE:], None)
        except InvalidTag:
            raise AuthenticationFailure("Ciphertext integrity check failed") from None

    # ------------------------------------------------------------------
    # Encrypt-then-MAC
    # ------------------------------------------------------------------

    def _encrypt_block(self, plaintext: bytes, key: bytes) -> bytes:
        mode_cls, key_length = BLOCK_CIPHERS[self._cipher]
        cipher_key = self._expand(key, key_length, "cipher")
        mac_key = self._expand(key, self._algorithm.digest_size, "mac")
        iv = self._random(IV_SIZE)
        if mode_cls is modes.CBC:
            padder = padding.PKCS7(BLOCK_BITS).padder()
            plaintext = padder.update(plaintext) + padder.finalize()
        encryptor = Cipher(algorithms.AES(cipher_key), mode_cls(iv)).encryptor()
        body = iv + encryptor.update(plaintext) + encryptor.finalize()
        return body + self._tag(mac_key, body).finalize()

    def _decrypt_block(self, ciphertext: bytes, key: bytes) -> bytes:
        mode_cls, key_length = BLOCK_CIPHERS[self._cipher]
        tag_size = self._algorithm.digest_size
        _min = IV_SIZE + tag_size
        if len(ciphertext) < _min:
            raise AuthenticationFailure(
                f"Ciphertext too short: {len(ciphertext)} bytes (minimum {_min})"
            )
        body, tag = ciphertext[:-tag_size], ciphertext[-tag_size:]
        mac_key = self._expand(key, tag_size, "mac")
        try:
            self._tag(mac_key, body).verify(tag)
        except InvalidSignature:
            raise AuthenticationFailure("Ciphertext integrity check failed") from None
        cipher_key = self._expand(key, key_length, "cipher")
        iv = body[:IV_SIZE]
        decryptor = Cipher(algorithms.AES(cipher_key), mode_cls(iv)).decryptor()
        try:
            plaintext = decryptor.update(body[IV_SIZE:]) + decryptor.finalize()
            if mode_cls is modes.CBC:
                unpadder = padding.PKCS7(BLOCK_BITS).unpadder()
                plaintext = unpadder.update(plaintext) + unpadder.finalize()
        except ValueError:
            raise AuthenticationFailure("Ciphertext is malformed") from None
        return plaintext
