"""Exceptions raised by Encrypted Sessions."""


class EncryptedSessionError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(EncryptedSessionError, ValueError):
    """Invalid construction settings (entropy, cipher, hash or randomness).

    Raised once, when the handler or codec is built; never per-operation.
    """


class AuthenticationFailure(EncryptedSessionError):
    """Ciphertext failed its integrity check.

    Covers tampered, truncated and wrongly-keyed blobs. No plaintext is ever
    attached to this exception.
    """


class StoreFailure(EncryptedSessionError):
    """A storage backend could not complete an operation."""

    def __init__(self, operation: str, storage_key: str, reason: str = "") -> None:
        message = f"Session store {operation} failed for key {storage_key}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.operation = operation
        self.storage_key = storage_key


class HandlerClosedError(EncryptedSessionError, RuntimeError):
    """A data operation was attempted before ``open()`` or after ``close()``."""
