"""Store protocol — value-agnostic, string-keyed cache persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterable, Mapping, Sequence
from typing import Any, ClassVar

Entry = tuple[str, Any]


def normalize_entries(entries: Iterable[Entry | Mapping[str, Any]]) -> list[Entry]:
    """Accept ``(key, value)`` pairs or ``{"key": ..., "value": ...}`` mappings.

    Extra mapping items (such as a ``ttl`` from the cache layer) are ignored.
    """
    result: list[Entry] = []
    for entry in entries:
        if isinstance(entry, Mapping):
            result.append((entry["key"], entry["value"]))
        else:
            key, value = entry
            result.append((key, value))
    return result


class Store(ABC):
    """Abstract base for all storage backends.

    Keys arrive fully qualified: the cache layer in front of the store
    prefixes them with ``<namespace>:`` before calling in.  ``namespace``
    is only consulted by :meth:`clear`, which removes the active
    namespace's keys (or every key when no namespace is set).

    Values are opaque.  Stores neither serialize nor validate them.
    """

    ttl_support: ClassVar[bool] = False

    namespace: str | None = None

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the stored value, or ``None`` if not found."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Create or overwrite a value."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a value.  Returns ``True`` if the key existed."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Delete every key in the active namespace."""
        ...

    @abstractmethod
    async def get_many(self, keys: Sequence[str]) -> list[Any | None]:
        """Return values in the order of *keys*, ``None`` for missing ones."""
        ...

    @abstractmethod
    async def set_many(self, entries: Iterable[Entry | Mapping[str, Any]]) -> None:
        """Store every entry.  Not atomic: earlier entries stay on failure."""
        ...

    @abstractmethod
    async def delete_many(self, keys: Sequence[str]) -> bool:
        """Delete *keys*.  Returns ``True`` if at least one of them existed."""
        ...

    @abstractmethod
    async def has(self, key: str) -> bool:
        """Return ``True`` if the key exists."""
        ...

    @abstractmethod
    async def has_many(self, keys: Sequence[str]) -> list[bool]:
        """Return existence flags in the order of *keys*."""
        ...

    @abstractmethod
    def iterator(self, namespace: str | None = None) -> AsyncIterator[Entry]:
        """Yield ``(key, value)`` pairs under *namespace*, ordered by key."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Release backend resources.  The store is unusable afterwards."""
        ...
