"""Session store interface."""
from abc import ABC, abstractmethod
from typing import Optional


class SessionStore(ABC):
    """Opaque key-value persistence for encrypted session records.

    Keys are the 26 character alphanumeric storage keys produced by the
    key deriver; values are ciphertext blobs the store never interprets.
    The store owns the atomicity and concurrency of its own persistence.
    """

    def open(self, save_path: str, name: str) -> None:
        """Hook called when the handler is opened. No-op by default."""

    def close(self) -> None:
        """Hook called when the handler is closed. No-op by default."""

    @abstractmethod
    def get(self, storage_key: str) -> Optional[bytes]:
        """Return the stored blob, or None if no record exists."""
        ...

    @abstractmethod
    def put(self, storage_key: str, data: bytes) -> bool:
        """Store a blob, overwriting any previous record. Returns success."""
        ...

    @abstractmethod
    def remove(self, storage_key: str) -> bool:
        """Remove a record. Returns success."""
        ...
