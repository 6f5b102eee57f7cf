"""InMemoryStore — zero-config, dict-backed storage for development and testing."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable, Mapping, Sequence
from typing import Any

from keyv_hana._internal.patterns import build_prefix_pattern, like_to_regex
from keyv_hana.exceptions import NotReadyError
from keyv_hana.stores.base import Entry, Store, normalize_entries


class InMemoryStore(Store):
    """In-memory store using a flat dict.  Data is lost on process exit.

    Matches :class:`~keyv_hana.stores.hana.HanaStore` semantics, including
    namespace matching and key-ordered iteration, so it can stand in for
    the database in tests.
    """

    def __init__(self, namespace: str | None = None) -> None:
        self.namespace = namespace
        self._data: dict[str, Any] | None = {}

    def _entries(self) -> dict[str, Any]:
        if self._data is None:
            raise NotReadyError()
        return self._data

    async def get(self, key: str) -> Any | None:
        return self._entries().get(key)

    async def set(self, key: str, value: Any) -> None:
        self._entries()[key] = value

    async def delete(self, key: str) -> bool:
        data = self._entries()
        if key not in data:
            return False
        del data[key]
        return True

    async def clear(self) -> None:
        data = self._entries()
        pattern = like_to_regex(build_prefix_pattern(self.namespace))
        for key in [k for k in data if pattern.fullmatch(k)]:
            del data[key]

    async def get_many(self, keys: Sequence[str]) -> list[Any | None]:
        data = self._entries()
        return [data.get(key) for key in keys]

    async def set_many(self, entries: Iterable[Entry | Mapping[str, Any]]) -> None:
        data = self._entries()
        for key, value in normalize_entries(entries):
            data[key] = value

    async def delete_many(self, keys: Sequence[str]) -> bool:
        data = self._entries()
        existed = False
        for key in keys:
            if key in data:
                del data[key]
                existed = True
        return existed

    async def has(self, key: str) -> bool:
        return key in self._entries()

    async def has_many(self, keys: Sequence[str]) -> list[bool]:
        data = self._entries()
        return [key in data for key in keys]

    async def iterator(self, namespace: str | None = None) -> AsyncIterator[Entry]:
        data = self._entries()
        pattern = like_to_regex(build_prefix_pattern(namespace))
        for key in sorted(k for k in data if pattern.fullmatch(k)):
            if key in data:
                yield key, data[key]

    async def disconnect(self) -> None:
        self._data = None
