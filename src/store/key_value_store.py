"""Persisted key-value stores.

The core only needs opaque get/set/remove by string key. The host decides
where values actually live; two implementations are provided here: an
in-memory store and a single JSON file on disk.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, List, Optional


logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract base class for string key-value storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get the value stored under key, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key if present (no error when it is absent)."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        pass


class InMemoryStore(KeyValueStore):
    """Store backed by a dict; contents are lost with the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())


class JsonFileStore(KeyValueStore):
    """Store that keeps every key in one JSON object on disk.

    The file is re-read on every access so several processes (or several
    engine instances) see each other's writes. An unreadable file is treated
    as empty and overwritten by the next write.
    """

    def __init__(self, path: str):
        """Initialize with the path of the JSON file.

        Args:
            path: File to read and write; parent directories are created on write
        """
        self.path = path

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error("Could not read key-value store %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.error("Key-value store %s does not hold a JSON object; ignoring it", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)
        tmp_path = self.path + '.tmp'
        with open(tmp_path, 'w') as f:
            json.dump(data, f, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def keys(self) -> List[str]:
        return list(self._read().keys())
