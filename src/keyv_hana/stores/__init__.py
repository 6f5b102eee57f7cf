"""Storage backends for cache entries."""

from keyv_hana.stores.base import Store
from keyv_hana.stores.hana import HanaStore, StoreState
from keyv_hana.stores.memory import InMemoryStore

__all__ = ["HanaStore", "InMemoryStore", "Store", "StoreState"]
