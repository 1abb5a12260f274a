"""
EncryptedSessionHandler: Encrypts session payloads keyed by the session id.

Provides the public API for Encrypted Sessions:
- ``open(save_path, name)`` / ``close()``: handler lifecycle
- ``write(id, data)``: encrypt and persist a payload
- ``read(id)``: fetch and decrypt a payload (empty if missing or tampered)
- ``destroy(id)``: remove a stored payload
- ``load(id)`` / ``save(id, mapping)``: dict sessions through the serializer

Every operation re-derives the key pair from the id it receives; nothing
session-specific is retained between calls.

Security Note:
    Never log session ids, plaintext or ciphertext values. Only storage keys
    and operation names are logged.
"""
import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from .config import HandlerConfig
from .crypto import AuthenticatedCodec, CipherCodec
from .exceptions import AuthenticationFailure, ConfigurationError, HandlerClosedError
from .keys import KeyDeriver, KeyPair
from .serializer import decode_session, encode_session
from .storage.base import SessionStore

logger = logging.getLogger("encrypted_sessions")

SessionID = Union[str, bytes]


class EncryptedSessionHandler:
    """Encryption adapter in front of a SessionStore.

    The storage key and the encryption key are both HMAC derivatives of the
    session id, so the store alone reveals neither the id nor the plaintext.
    Decryption failures fail closed: the session reads as empty.

    Args:
        store: Persistence backend for storage key -> ciphertext records.
        entropy: Deployment secret, at least 64 characters; required unless
            ``config`` is given.
        cipher: Cipher identifier passed to the codec.
        hash_algorithm: Hash for key derivation and codec authentication.
        allow_weak_rand: Passed to the codec's randomness check.
        codec: Alternative AuthenticatedCodec; built from the settings if omitted.
        config: Prevalidated HandlerConfig used instead of the individual settings.

    Raises:
        ConfigurationError: On short entropy or an unsupported cipher/hash.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        entropy: Optional[str] = None,
        cipher: str = "aes-256-gcm",
        hash_algorithm: str = "sha256",
        allow_weak_rand: bool = False,
        codec: Optional[AuthenticatedCodec] = None,
        config: Optional[HandlerConfig] = None,
    ):
        if config is None:
            config = HandlerConfig.create(
                cipher=cipher,
                hash_algorithm=hash_algorithm,
                entropy=entropy,
                allow_weak_rand=allow_weak_rand,
            )
        elif entropy is not None:
            raise ConfigurationError(
                "Pass either a HandlerConfig or individual settings, not both"
            )
        if codec is None:
            codec = CipherCodec(
                config.cipher, config.hash_algorithm, config.allow_weak_rand,
            )
        elif not isinstance(codec, AuthenticatedCodec):
            raise ConfigurationError(
                f"{type(codec).__name__} does not implement encrypt/decrypt"
            )
        self._config = config
        self._store = store
        self._codec = codec
        self._deriver = KeyDeriver(config.entropy, config.hash_algorithm)
        self._save_path: Optional[str] = None
        self._name: Optional[str] = None
        self._open = False

    @classmethod
    def from_config(
        cls,
        store: SessionStore,
        config: HandlerConfig,
        codec: Optional[AuthenticatedCodec] = None,
    ) -> "EncryptedSessionHandler":
        """Build a handler from an already validated HandlerConfig."""
        return cls(store, config=config, codec=codec)

    def __repr__(self) -> str:
        state = "open" if self._open else "closed"
        return (
            f"<EncryptedSessionHandler [{state}] cipher={self._config.cipher} "
            f"hash={self._config.hash_algorithm} store={type(self._store).__name__}>"
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> HandlerConfig:
        return self._config

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def save_path(self) -> Optional[str]:
        return self._save_path

    @property
    def name(self) -> Optional[str]:
        return self._name

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self, save_path: str, name: str) -> bool:
        """Record the save path and session name and forward them to the store.

        Some backends (e.g. database) ignore both values.
        """
        self._save_path = save_path
        self._name = name
        self._store.open(save_path, name)
        self._open = True
        logger.debug("Session handler opened: name=%s", name)
        return True

    def close(self) -> bool:
        self._store.close()
        self._open = False
        return True

    def _keys(self, session_id: SessionID) -> KeyPair:
        if not self._open:
            raise HandlerClosedError(
                "Session handler is closed; call open() first"
            )
        return self._deriver.derive(session_id)

    # ------------------------------------------------------------------
    # Data operations
    # ------------------------------------------------------------------

    def write(self, session_id: SessionID, data: Union[bytes, str]) -> bool:
        """Encrypt ``data`` and persist it under the id's storage key.

        Args:
            session_id: The session identifier.
            data: Session payload; str is UTF-8 encoded.

        Returns:
            The store's ``put`` result.
        """
        keys = self._keys(session_id)
        if isinstance(data, str):
            data = data.encode("utf-8")
        ciphertext = self._codec.encrypt(bytes(data), keys.enc_key)
        return self._store.put(keys.storage_key, ciphertext)

    def read(self, session_id: SessionID) -> bytes:
        """Fetch and decrypt the payload stored for ``session_id``.

        Returns:
            The plaintext payload, or ``b""`` when no record exists or the
            record fails authentication.
        """
        keys = self._keys(session_id)
        raw = self._store.get(keys.storage_key)
        if raw is None:
            return b""
        try:
            return self._codec.decrypt(raw, keys.enc_key)
        except AuthenticationFailure as err:
            logger.warning(
                "Discarding session record %s: %s", keys.storage_key, err,
            )
            return b""

    def destroy(self, session_id: SessionID) -> bool:
        """Remove the record stored for ``session_id``.

        Returns:
            The store's ``remove`` result.
        """
        keys = self._keys(session_id)
        logger.debug("Destroying session record %s", keys.storage_key)
        return self._store.remove(keys.storage_key)

    # ------------------------------------------------------------------
    # Dict sessions
    # ------------------------------------------------------------------

    def load(self, session_id: SessionID) -> dict[str, Any]:
        """Read a session and decode it into a dict.

        Missing, tampered and undecodable records all load as ``{}``.
        """
        payload = self.read(session_id)
        try:
            return decode_session(payload)
        except (TypeError, ValueError) as err:
            logger.warning("Session payload is not a valid mapping: %s", err)
            return {}

    def save(self, session_id: SessionID, data: Mapping[str, Any]) -> bool:
        """Encode a session mapping and write it."""
        return self.write(session_id, encode_session(data))
