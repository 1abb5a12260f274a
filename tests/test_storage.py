"""
Tests for session store backends.

Tests cover:
- MemoryStore get/put/remove
- FileStore layout, open() configuration and failure reporting
"""
import pytest

from encrypted_sessions.exceptions import StoreFailure
from encrypted_sessions.storage import FileStore, MemoryStore, SessionStore

KEY = "AbCdEfGhIjKlMnOpQrStUvWxYz"


# --- Test MemoryStore ---

class TestMemoryStore:
    """Tests for the in-memory backend."""

    def test_is_session_store(self):
        """MemoryStore implements the store interface."""
        assert isinstance(MemoryStore(), SessionStore)

    def test_missing_is_none(self):
        """Unknown keys read as None."""
        assert MemoryStore().get(KEY) is None

    def test_put_get(self):
        """Stored blobs are returned unchanged."""
        store = MemoryStore()
        assert store.put(KEY, b"\x00blob") is True
        assert store.get(KEY) == b"\x00blob"
        assert KEY in store
        assert len(store) == 1

    def test_overwrite(self):
        """put replaces an existing record."""
        store = MemoryStore()
        store.put(KEY, b"one")
        store.put(KEY, b"two")
        assert store.get(KEY) == b"two"

    def test_remove(self):
        """remove deletes the record and is idempotent."""
        store = MemoryStore()
        store.put(KEY, b"blob")
        assert store.remove(KEY) is True
        assert store.get(KEY) is None
        assert store.remove(KEY) is True
        assert store.keys() == []

    def test_len_and_contains_take_lock(self):
        """Size and membership checks go through the store lock."""
        store = MemoryStore()
        store.put(KEY, b"blob")
        acquired = []

        class CountingLock:
            def __enter__(self):
                acquired.append(True)

            def __exit__(self, *exc):
                return False

        store._lock = CountingLock()
        assert len(store) == 1
        assert KEY in store
        assert len(acquired) == 2


# --- Test FileStore ---

class TestFileStore:
    """Tests for the filesystem backend."""

    def test_layout(self, tmp_path):
        """Records are written as <dir>/<prefix>_<key>."""
        store = FileStore(tmp_path)
        assert store.put(KEY, b"blob") is True
        assert (tmp_path / f"sess_{KEY}").read_bytes() == b"blob"
        assert store.get(KEY) == b"blob"

    def test_open_sets_directory_and_prefix(self, tmp_path):
        """open() supplies the save path and session name."""
        store = FileStore()
        store.open(str(tmp_path), "PHPSESSID")
        store.put(KEY, b"blob")
        assert store.directory == tmp_path
        assert (tmp_path / f"PHPSESSID_{KEY}").exists()

    def test_open_keeps_defaults_for_empty_values(self, tmp_path):
        """Empty open() arguments keep the constructor settings."""
        store = FileStore(tmp_path, prefix="app")
        store.open("", "")
        assert store.directory == tmp_path
        assert store.prefix == "app"

    def test_creates_directory(self, tmp_path):
        """Missing directories are created on first write."""
        target = tmp_path / "nested" / "sessions"
        store = FileStore(target)
        assert store.put(KEY, b"blob") is True
        assert store.get(KEY) == b"blob"

    def test_missing_is_none(self, tmp_path):
        """Unknown keys read as None."""
        assert FileStore(tmp_path).get(KEY) is None

    def test_remove(self, tmp_path):
        """remove deletes the file and is idempotent."""
        store = FileStore(tmp_path)
        store.put(KEY, b"blob")
        assert store.remove(KEY) is True
        assert not (tmp_path / f"sess_{KEY}").exists()
        assert store.remove(KEY) is True

    def test_no_temporary_files_left(self, tmp_path):
        """Atomic writes leave only the record behind."""
        store = FileStore(tmp_path)
        store.put(KEY, b"one")
        store.put(KEY, b"two")
        assert [p.name for p in tmp_path.iterdir()] == [f"sess_{KEY}"]

    def test_unconfigured_directory(self):
        """Without a save path the store raises StoreFailure."""
        with pytest.raises(StoreFailure):
            FileStore().get(KEY)

    def test_write_failure_returns_false(self, tmp_path):
        """An unwritable location reports failure instead of raising."""
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"")
        store = FileStore(blocker / "sessions")
        assert store.put(KEY, b"blob") is False

    def test_read_failure_is_not_found(self, tmp_path):
        """An unreadable record is reported as missing."""
        (tmp_path / f"sess_{KEY}").mkdir()
        assert FileStore(tmp_path).get(KEY) is None
