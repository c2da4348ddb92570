"""Key-value storage backends with change notification.

Values are opaque strings (JSON documents in practice) written with
full-overwrite semantics. Every write carries the identity of its writer
so that subscribers can tell their own writes from external ones, the way
a browser ``storage`` event only fires in other tabs.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from coop_lending.exceptions import StorageError
from coop_lending.models.base import ChangeEvent

logger = logging.getLogger(__name__)

Listener = Callable[[ChangeEvent], None]


class KeyValueStorage(ABC):
    """String key-value store that notifies subscribers of writes."""

    def __init__(self) -> None:
        self._listeners: dict[int, Listener] = {}
        self._next_token = 0

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Get the value stored under ``key``, or None."""

    @abstractmethod
    def set(self, key: str, value: str, source: str | None = None) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str, source: str | None = None) -> None:
        """Delete ``key`` if present."""

    def subscribe(self, listener: Listener) -> int:
        """Register a change listener; returns a token for ``unsubscribe``."""
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = listener
        return token

    def unsubscribe(self, token: int) -> None:
        self._listeners.pop(token, None)

    def _notify(self, key: str, value: str | None, source: str | None) -> None:
        event = ChangeEvent(key=key, value=value, source=source, event_time=datetime.now())
        for listener in list(self._listeners.values()):
            listener(event)


class InMemoryStorage(KeyValueStorage):
    """Process-local storage, shared by every session holding a reference."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__()
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str, source: str | None = None) -> None:
        self._data[key] = value
        self._notify(key, value, source)

    def remove(self, key: str, source: str | None = None) -> None:
        if self._data.pop(key, None) is not None:
            self._notify(key, None, source)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStorage(KeyValueStorage):
    """Storage backed by a single JSON document on disk.

    The whole document is rewritten on every write. Changes made to the
    file by other processes are picked up by ``poll()``, which notifies
    subscribers of every key whose value differs from the last snapshot.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize file storage.

        Parameters
        ----------
        path : str | Path
            JSON file holding all keys. Created on first write.
        """
        super().__init__()
        self.path = Path(path)
        self._snapshot: dict[str, str] = self._read()

    def get(self, key: str) -> str | None:
        return self._snapshot.get(key)

    def set(self, key: str, value: str, source: str | None = None) -> None:
        data = dict(self._snapshot)
        data[key] = value
        self._write(data)
        self._notify(key, value, source)

    def remove(self, key: str, source: str | None = None) -> None:
        if key not in self._snapshot:
            return
        data = dict(self._snapshot)
        del data[key]
        self._write(data)
        self._notify(key, None, source)

    def keys(self) -> list[str]:
        return list(self._snapshot)

    def poll(self) -> list[str]:
        """Reload the file and notify subscribers of external changes.

        Returns
        -------
        list[str]
            Keys whose value changed since the last read or write.
        """
        current = self._read()
        changed = [
            key
            for key in set(self._snapshot) | set(current)
            if self._snapshot.get(key) != current.get(key)
        ]
        self._snapshot = current
        for key in sorted(changed):
            self._notify(key, current.get(key), None)
        return sorted(changed)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: top level is not an object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StorageError(f"Failed to write {self.path}: {exc}") from exc
        self._snapshot = data
