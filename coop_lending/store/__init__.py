"""Persistence: key-value storage, repositories and UI scratch state."""

from coop_lending.store.drafts import DraftStore, UiStateStore
from coop_lending.store.repository import CustomerRepository, MarketingTargetRepository, RecordRepository
from coop_lending.store.storage import InMemoryStorage, JsonFileStorage, KeyValueStorage

__all__ = [
    "CustomerRepository",
    "DraftStore",
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorage",
    "MarketingTargetRepository",
    "RecordRepository",
    "UiStateStore",
]
