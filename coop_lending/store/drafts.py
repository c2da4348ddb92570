"""UI scratch state: per-record drafts, active tab and editing pointer."""

import json
import logging
import time
from collections.abc import Callable
from typing import Any

from coop_lending.config import StorageConfig
from coop_lending.exceptions import StorageError
from coop_lending.store.storage import KeyValueStorage

logger = logging.getLogger(__name__)


class DraftStore:
    """Debounced per-record draft slots.

    ``stage`` records the latest form state and writes it once it has been
    left unchanged for the debounce interval; ``flush_due`` is meant to be
    called from the UI loop. Drafts are cleared only by an explicit submit
    or cancel.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        config: StorageConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._storage = storage
        self._config = config or StorageConfig()
        self._clock = clock
        self._pending: dict[str, tuple[float, dict[str, Any]]] = {}

    def stage(self, record_id: str | None, payload: dict[str, Any]) -> None:
        """Record a change; the write happens after the debounce interval."""
        key = self._config.draft_key(record_id)
        self._pending[key] = (self._clock(), payload)

    def flush_due(self) -> list[str]:
        """Write every staged draft that has been quiet long enough."""
        now = self._clock()
        due = [
            key
            for key, (staged_at, _) in self._pending.items()
            if now - staged_at >= self._config.draft_debounce_seconds
        ]
        for key in due:
            self._write(key, self._pending.pop(key)[1])
        return due

    def flush(self) -> None:
        """Write all staged drafts immediately."""
        for key, (_, payload) in list(self._pending.items()):
            self._write(key, payload)
        self._pending.clear()

    def load(self, record_id: str | None) -> dict[str, Any] | None:
        """Get the latest draft for a record, staged or persisted."""
        key = self._config.draft_key(record_id)
        if key in self._pending:
            return self._pending[key][1]
        raw = self._storage.get(key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable draft %s", key)
            return None
        return data if isinstance(data, dict) else None

    def clear(self, record_id: str | None) -> None:
        key = self._config.draft_key(record_id)
        self._pending.pop(key, None)
        try:
            self._storage.remove(key)
        except StorageError as exc:
            logger.warning("Could not clear draft %s: %s", key, exc)

    def _write(self, key: str, payload: dict[str, Any]) -> None:
        try:
            self._storage.set(key, json.dumps(payload, ensure_ascii=False, default=str))
        except StorageError as exc:
            logger.warning("Could not save draft %s: %s", key, exc)


class UiStateStore:
    """Last active tab and id of the record being edited."""

    DEFAULT_TAB = "dashboard"

    def __init__(self, storage: KeyValueStorage, config: StorageConfig | None = None) -> None:
        self._storage = storage
        self._config = config or StorageConfig()

    @property
    def active_tab(self) -> str:
        return self._storage.get(self._config.ui_tab_key) or self.DEFAULT_TAB

    @active_tab.setter
    def active_tab(self, tab: str) -> None:
        self._safe_set(self._config.ui_tab_key, tab)

    @property
    def editing_id(self) -> str | None:
        return self._storage.get(self._config.ui_editing_id_key)

    @editing_id.setter
    def editing_id(self, record_id: str | None) -> None:
        if record_id:
            self._safe_set(self._config.ui_editing_id_key, record_id)
        else:
            try:
                self._storage.remove(self._config.ui_editing_id_key)
            except StorageError as exc:
                logger.warning("Could not clear editing pointer: %s", exc)

    def _safe_set(self, key: str, value: str) -> None:
        try:
            self._storage.set(key, value)
        except StorageError as exc:
            logger.warning("Could not save UI state %s: %s", key, exc)
