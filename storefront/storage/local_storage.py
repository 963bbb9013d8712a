"""
Local Storage Module

Durable string key/value storage used for session continuity. The admin
session writes 'userId' and 'projectId' when it becomes authenticated and
removes them on sign-out.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Dict, Optional, Union
from loguru import logger


class LocalStorage(ABC):
    """String key/value storage."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the value for key, or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key if present."""


class MemoryLocalStorage(LocalStorage):
    """Non-durable storage, for tests and single-run tools."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def items(self) -> Dict[str, str]:
        return dict(self._items)


class JSONFileLocalStorage(LocalStorage):
    """
    Storage persisted to a JSON file.

    The whole file is rewritten on every change; it only ever holds a
    handful of keys.

    Example:
        >>> storage = JSONFileLocalStorage('.storefront/local_storage.json')
        >>> storage.set_item('userId', 'abc123')
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._lock = Lock()

    def _read(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Local storage file {self._path} unreadable, starting empty: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + '.tmp')
        with open(tmp_path, 'w') as f:
            json.dump(data, f)
        tmp_path.replace(self._path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = str(value)
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)
