"""Cache policy for generated Datasets.

Storage is delegated to a KeyValueStore; this module decides what a stored
entry means. An entry is only returned when it was produced under exactly
the same GenerationKey. Corrupt entries are logged, removed, and reported as
a miss so the caller regenerates.
"""

import logging
from typing import Optional

from model.EarningsData import Dataset, GenerationKey
from store.dataset_codec import DatasetFormatError, dumps_snapshot, loads_snapshot
from store.key_value_store import KeyValueStore


logger = logging.getLogger(__name__)


class GenerationCache:
    """Stores one Dataset per namespace, tagged with its GenerationKey."""

    def __init__(self, store: KeyValueStore, namespace: str = 'earnings'):
        """Initialize with the backing store.

        Args:
            store: KeyValueStore that persists the entries
            namespace: Prefix that separates dataset families in the store
        """
        self.store = store
        self.namespace = namespace

    @property
    def storage_key(self) -> str:
        return f"ofStats.{self.namespace}.snapshot"

    def _load(self) -> Optional[tuple]:
        text = self.store.get(self.storage_key)
        if text is None:
            return None
        try:
            return loads_snapshot(text)
        except DatasetFormatError as e:
            logger.error("Discarding corrupt %s cache entry: %s", self.namespace, e)
            self.store.remove(self.storage_key)
            return None

    def get(self, key: GenerationKey) -> Optional[Dataset]:
        """Get the cached Dataset if it was generated under this key."""
        loaded = self._load()
        if loaded is None:
            return None
        stored_key, dataset = loaded
        if stored_key != key.as_string():
            logger.debug("Cache key mismatch for %s: %s != %s", self.namespace, stored_key, key.as_string())
            return None
        return dataset

    def put(self, key: GenerationKey, dataset: Dataset) -> None:
        self.store.set(self.storage_key, dumps_snapshot(key, dataset))

    def last_key(self) -> Optional[str]:
        """Fingerprint of whatever is stored, valid or not for the current config."""
        loaded = self._load()
        return loaded[0] if loaded else None

    def clear(self) -> None:
        self.store.remove(self.storage_key)


