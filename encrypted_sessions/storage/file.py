"""
File Session Store: One file per encrypted session record.

Records live at ``<save_path>/<name>_<storage_key>``. The directory and the
file prefix come from the constructor or from ``open(save_path, name)``.
Writes go to a temporary file in the same directory and are moved into place
with ``os.replace`` so readers never observe a partial record.
"""
import os
import logging
import tempfile
from pathlib import Path
from typing import Optional, Union

from ..exceptions import StoreFailure
from .base import SessionStore

logger = logging.getLogger("encrypted_sessions")

DEFAULT_PREFIX = "sess"


class FileStore(SessionStore):
    """Filesystem-backed SessionStore.

    Args:
        directory: Directory holding the records; may be set later by ``open``.
        prefix: File name prefix; replaced by the session name on ``open``.
    """

    def __init__(
        self,
        directory: Optional[Union[str, Path]] = None,
        prefix: str = DEFAULT_PREFIX,
    ) -> None:
        self._directory = Path(directory) if directory else None
        self._prefix = prefix

    @property
    def directory(self) -> Optional[Path]:
        return self._directory

    @property
    def prefix(self) -> str:
        return self._prefix

    def open(self, save_path: str, name: str) -> None:
        if save_path:
            self._directory = Path(save_path)
        if name:
            self._prefix = name

    def path_for(self, storage_key: str) -> Path:
        """Return the record path for a storage key.

        Raises:
            StoreFailure: If no directory has been configured.
        """
        if self._directory is None:
            raise StoreFailure("lookup", storage_key, "no save path configured")
        return self._directory / f"{self._prefix}_{storage_key}"

    def get(self, storage_key: str) -> Optional[bytes]:
        path = self.path_for(storage_key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as err:
            logger.error("Unable to read session record %s: %s", storage_key, err)
            return None

    def put(self, storage_key: str, data: bytes) -> bool:
        path = self.path_for(storage_key)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
            with os.fdopen(fd, "wb") as fp:
                fp.write(data)
            os.replace(tmp_name, path)
        except OSError as err:
            logger.error("Unable to write session record %s: %s", storage_key, err)
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            return False
        logger.debug("Wrote session record %s", storage_key)
        return True

    def remove(self, storage_key: str) -> bool:
        path = self.path_for(storage_key)
        try:
            path.unlink(missing_ok=True)
        except OSError as err:
            logger.error("Unable to remove session record %s: %s", storage_key, err)
            return False
        logger.debug("Removed session record %s", storage_key)
        return True
