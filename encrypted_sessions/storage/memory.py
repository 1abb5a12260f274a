"""In-memory session store."""
import threading
from typing import Optional

from .base import SessionStore


class MemoryStore(SessionStore):
    """
    In-memory implementation of SessionStore.

    Records are lost when the process exits; intended for tests and
    single-process deployments.
    """

    def __init__(self) -> None:
        self._records: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, storage_key: str) -> Optional[bytes]:
        with self._lock:
            return self._records.get(storage_key)

    def put(self, storage_key: str, data: bytes) -> bool:
        with self._lock:
            self._records[storage_key] = bytes(data)
        return True

    def remove(self, storage_key: str) -> bool:
        with self._lock:
            self._records.pop(storage_key, None)
        return True

    def keys(self) -> list[str]:
        """List stored storage keys."""
        with self._lock:
            return list(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, storage_key: object) -> bool:
        with self._lock:
            return storage_key in self._records
