"""Key-value storage used to persist carts between restarts"""

import logging
import re
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class KeyValueStorage:
    """Interface for string key-value persistence"""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def has(self, key: str) -> bool:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    """In-memory storage (lost on restart)"""

    def __init__(self):
        self.values: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def has(self, key: str) -> bool:
        return key in self.values

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class FileStorage(KeyValueStorage):
    """Stores each key as a JSON file in a directory"""

    _UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{self._UNSAFE_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def has(self, key: str) -> bool:
        return self._path(key).exists()

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)
        logger.debug(f"Persisted {key} to {path}")

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
