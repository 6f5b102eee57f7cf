"""keyv_hana — a SAP HANA storage adapter for key-value caches.

Values are opaque, keys are strings, and namespaces are key prefixes
(``<namespace>:<key>``) applied by the cache layer in front of the store.
"""

from keyv_hana._internal.patterns import build_composite_id, build_prefix_pattern, escape_like
from keyv_hana.config import HanaSettings, HanaStoreOptions
from keyv_hana.exceptions import (
    ExecutionError,
    HanaConnectionError,
    NotReadyError,
    ProvisioningError,
    StoreError,
)
from keyv_hana.session import HanaSession
from keyv_hana.stores import HanaStore, InMemoryStore, Store, StoreState

__all__ = [
    "ExecutionError",
    "HanaConnectionError",
    "HanaSession",
    "HanaSettings",
    "HanaStore",
    "HanaStoreOptions",
    "InMemoryStore",
    "NotReadyError",
    "ProvisioningError",
    "Store",
    "StoreError",
    "StoreState",
    "build_composite_id",
    "build_prefix_pattern",
    "escape_like",
]
