import logging
import os
import re
import tempfile
from typing import Dict, Optional


logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class StorageError(Exception):
    pass


class StorageQuotaExceeded(StorageError):
    pass


class KeyValueStorage:
    """Synchronous string key-value store, the shape of a browser's localStorage."""

    available = True

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    def __init__(self, quota: Optional[int] = None):
        self._items: Dict[str, str] = {}
        self.quota = quota

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota is not None:
            used = sum(len(v) for k, v in self._items.items() if k != key)
            if used + len(value) > self.quota:
                raise StorageQuotaExceeded(
                    f"Storing {len(value)} bytes under {key!r} exceeds quota of {self.quota}"
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage(KeyValueStorage):
    """One UTF-8 file per key under ``directory``; writes replace atomically."""

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, _UNSAFE_KEY_CHARS.sub("_", key) + ".json")

    def get_item(self, key: str) -> Optional[str]:
        try:
            with open(self._path(key), "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        os.makedirs(self.directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, self._path(key))
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def remove_item(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass


def create_storage(path: Optional[str]) -> KeyValueStorage:
    if not path:
        return MemoryStorage()
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as exc:
        logger.warning("Progress storage %s unusable (%s), keeping positions in memory", path, exc)
        return MemoryStorage()
    if not os.access(path, os.W_OK):
        logger.warning("Progress storage %s is not writable, keeping positions in memory", path)
        return MemoryStorage()
    return FileStorage(path)
