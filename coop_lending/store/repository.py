"""In-memory record repositories backed by key-value storage.

The in-memory collection is authoritative for the session. Every mutation
is followed by a fire-and-forget write of the whole collection; a failed
write is logged and otherwise ignored. Writes observed from another
session replace the collection wholesale (last write wins).
"""

import logging
import uuid
from collections.abc import Callable
from typing import Generic, TypeVar

from coop_lending.exceptions import SchemaError, StorageError
from coop_lending.models.base import ChangeEvent
from coop_lending.models.lending import Customer, MarketingTarget
from coop_lending.store.serialization import dump_collection, load_collection
from coop_lending.store.storage import KeyValueStorage

logger = logging.getLogger(__name__)

T = TypeVar("T", Customer, MarketingTarget)

CollectionListener = Callable[[list], None]


class RecordRepository(Generic[T]):
    """Ordered collection of records keyed by ``id``."""

    record_type: type[T]

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str,
        session_id: str | None = None,
    ) -> None:
        """Initialize the repository.

        Parameters
        ----------
        storage : KeyValueStorage
            Persistence backend.
        key : str
            Storage key holding the serialized collection.
        session_id : str | None
            Writer identity; generated when omitted.
        """
        self._storage = storage
        self.key = key
        self.session_id = session_id or uuid.uuid4().hex
        self._records: list[T] = []
        self._listeners: dict[int, CollectionListener] = {}
        self._next_token = 0
        self._subscription: int | None = storage.subscribe(self._on_storage_change)

    def load(self) -> list[T]:
        """Replace the in-memory collection with the persisted one.

        A missing or malformed blob yields an empty collection; this never
        raises.
        """
        self._records = self._decode(self._storage.get(self.key))
        logger.debug("Loaded %d %s records from %s", len(self._records), self.record_type.__name__, self.key)
        return list(self._records)

    def get_all(self) -> list[T]:
        """Return the full collection; callers filter."""
        return list(self._records)

    def get(self, record_id: str) -> T | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def upsert(self, record: T) -> None:
        """Replace the record with the same id in place, else prepend it."""
        for idx, existing in enumerate(self._records):
            if existing.id == record.id:
                self._records[idx] = record
                break
        else:
            self._records.insert(0, record)
        self._persist()

    def delete(self, record_id: str) -> bool:
        """Remove a record by id.

        Returns
        -------
        bool
            True if a record was removed.
        """
        before = len(self._records)
        self._records = [r for r in self._records if r.id != record_id]
        removed = len(self._records) != before
        if removed:
            self._persist()
        return removed

    def subscribe_to_external_change(self, listener: CollectionListener) -> int:
        """Register a callback receiving the new collection after an external write."""
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = listener
        return token

    def unsubscribe(self, token: int) -> None:
        self._listeners.pop(token, None)

    def close(self) -> None:
        """Stop observing the storage backend."""
        if self._subscription is not None:
            self._storage.unsubscribe(self._subscription)
            self._subscription = None

    def __len__(self) -> int:
        return len(self._records)

    def _persist(self) -> None:
        try:
            self._storage.set(self.key, dump_collection(self._records), source=self.session_id)
        except StorageError as exc:
            logger.warning("Could not persist %s (%d records kept in memory): %s", self.key, len(self._records), exc)

    def _decode(self, raw: str | None) -> list[T]:
        if raw is None:
            return []
        try:
            return load_collection(self.record_type, raw)
        except SchemaError as exc:
            logger.warning("Discarding malformed %s collection: %s", self.key, exc)
            return []

    def _on_storage_change(self, event: ChangeEvent) -> None:
        if event.key != self.key or event.source == self.session_id:
            return
        if event.value is None:
            return
        try:
            records = load_collection(self.record_type, event.value)
        except SchemaError as exc:
            logger.warning("Ignoring malformed external write to %s: %s", self.key, exc)
            return
        self._records = records
        logger.info("Replaced %s with %d records from an external write", self.key, len(records))
        for listener in list(self._listeners.values()):
            listener(list(records))


class CustomerRepository(RecordRepository[Customer]):
    """Repository of loan customers."""

    record_type = Customer

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = "koperasi_customers_db",
        session_id: str | None = None,
    ) -> None:
        super().__init__(storage, key, session_id)


class MarketingTargetRepository(RecordRepository[MarketingTarget]):
    """Repository of marketing targets."""

    record_type = MarketingTarget

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = "koperasi_marketing_targets",
        session_id: str | None = None,
    ) -> None:
        super().__init__(storage, key, session_id)
