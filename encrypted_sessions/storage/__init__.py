"""Session store backends."""

from .base import SessionStore
from .memory import MemoryStore
from .file import FileStore

__all__ = [
    "SessionStore",
    "MemoryStore",
    "FileStore",
]
