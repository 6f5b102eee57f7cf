"""HanaStore — SAP HANA column-table storage backend."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import AsyncIterator, Callable, Iterable, Mapping, Sequence
from typing import Any

from keyv_hana._internal.patterns import LIKE_ESCAPE, build_prefix_pattern, quote_identifier
from keyv_hana.config import HanaSettings, HanaStoreOptions
from keyv_hana.exceptions import (
    ExecutionError,
    HanaConnectionError,
    NotReadyError,
    ProvisioningError,
)
from keyv_hana.session import HanaSession, Row
from keyv_hana.stores.base import Entry, Store, normalize_entries

_logger = logging.getLogger(__name__)

# "cannot use duplicate table name"
DUPLICATE_TABLE_NAME = 288

_ESCAPE_CLAUSE = f"ESCAPE '{LIKE_ESCAPE}'"

ErrorListener = Callable[[BaseException], object]


class StoreState(enum.Enum):
    CONSTRUCTING = "constructing"
    CONNECTING = "connecting"
    PROVISIONING = "provisioning"
    READY = "ready"
    FAILED = "failed"
    DISCONNECTED = "disconnected"


def _placeholders(count: int) -> str:
    return ", ".join("?" * count)


class HanaStore(Store):
    """Persistent store backed by a HANA column table.

    The table has two columns, ``"ID" NVARCHAR(key_size) PRIMARY KEY`` and
    ``"VALUE" NCLOB``.  Construction does no I/O.  The connection is opened
    (and the table created, unless ``create_table`` is off) by
    :meth:`connect`, or lazily by the first operation.  Initialization is
    attempted exactly once: after a failure every operation raises
    :class:`NotReadyError` chained to the original error.

    Parameters:
        options: Validated store options.  Alternatively pass the option
                 fields as keyword arguments.
        namespace: Active namespace for :meth:`clear`.
        session: Pre-built :class:`HanaSession`.  Useful for testing.

    Example::

        async with HanaStore(host="localhost", port=30015, user="SYSTEM",
                             password="secret") as store:
            await store.set("greeting", "hello")
            assert await store.get("greeting") == "hello"
    """

    def __init__(
        self,
        options: HanaStoreOptions | None = None,
        *,
        namespace: str | None = None,
        session: HanaSession | None = None,
        **option_fields: Any,
    ) -> None:
        if options is not None and option_fields:
            raise TypeError("pass either an options object or option keywords, not both")
        self.opts = options if options is not None else HanaStoreOptions(**option_fields)
        self.namespace = namespace
        self._session = session or HanaSession(self.opts.connect_kwargs())
        self._table = self._qualified_table_name()
        self._state = StoreState.CONSTRUCTING
        self._init_error: Exception | None = None
        self._init_task: asyncio.Future[None] | None = None
        self._error_listeners: list[ErrorListener] = []

    @classmethod
    def from_env(cls, *, namespace: str | None = None, **overrides: Any) -> HanaStore:
        """Build a store from ``HANA_*`` environment variables."""
        return cls(HanaSettings().to_options(**overrides), namespace=namespace)

    def _qualified_table_name(self) -> str:
        table = quote_identifier(self.opts.table)
        if self.opts.schema_name:
            return f"{quote_identifier(self.opts.schema_name)}.{table}"
        return table

    @property
    def table_name(self) -> str:
        return self._table

    @property
    def state(self) -> StoreState:
        return self._state

    def on_error(self, listener: ErrorListener) -> None:
        """Register *listener* to be called with an initialization failure."""
        self._error_listeners.append(listener)

    # ── Lifecycle ────────────────────────────────────────────

    async def connect(self) -> None:
        """Open the session and provision the table, once.

        Initialization runs in its own task, so a caller that is cancelled
        while waiting (e.g. by ``asyncio.wait_for``) does not abort it for
        everyone else.  Raises the original :class:`HanaConnectionError` or
        :class:`ProvisioningError` if initialization failed, now or on an
        earlier call.  Raises :class:`NotReadyError` after :meth:`disconnect`.
        """
        if self._state is StoreState.CONSTRUCTING and self._init_task is None:
            self._init_task = asyncio.ensure_future(self._run_initialization())
        if self._init_task is not None and not self._init_task.done():
            await asyncio.wait({self._init_task})

        if self._state is StoreState.READY:
            return
        if self._state is StoreState.FAILED and self._init_error is not None:
            raise self._init_error.with_traceback(None)
        raise NotReadyError()

    async def _run_initialization(self) -> None:
        try:
            await self._initialize()
        except asyncio.CancelledError:
            await self._release_session()
            self._fail(NotReadyError("initialization cancelled"))
            raise
        except Exception as exc:
            await self._release_session()
            self._fail(exc)
            return
        self._state = StoreState.READY
        _logger.debug("HANA store ready (table %s)", self._table)

    async def _initialize(self) -> None:
        self._state = StoreState.CONNECTING
        try:
            await self._session.open()
        except (self._session.driver_error, OSError) as exc:
            raise HanaConnectionError(str(exc)) from exc

        if self.opts.create_table:
            self._state = StoreState.PROVISIONING
            await self._create_table()

    async def _create_table(self) -> None:
        sql = (
            f"CREATE COLUMN TABLE {self._table} "
            f'("ID" NVARCHAR({self.opts.key_size}) PRIMARY KEY, "VALUE" NCLOB)'
        )
        try:
            await self._session.execute(sql)
        except ExecutionError as exc:
            if exc.errorcode == DUPLICATE_TABLE_NAME:
                _logger.debug("Table %s already exists", self._table)
                return
            raise ProvisioningError(self._table, exc.detail) from exc
        _logger.info("Created table %s", self._table)

    async def _release_session(self) -> None:
        try:
            await self._session.close()
        except (self._session.driver_error, OSError):
            _logger.warning("Could not close the connection after a failed initialization", exc_info=True)

    def _fail(self, exc: Exception) -> None:
        self._state = StoreState.FAILED
        self._init_error = exc
        _logger.error("HANA store initialization failed: %s", exc, exc_info=exc)
        for listener in self._error_listeners:
            try:
                listener(exc)
            except Exception:
                _logger.exception("Error listener %r failed", listener)

    async def _ensure_ready(self) -> None:
        if self._state is StoreState.READY:
            return
        try:
            await self.connect()
        except NotReadyError:
            raise
        except Exception as exc:
            raise NotReadyError(f"initialization failed: {exc}") from exc

    async def disconnect(self) -> None:
        """Close the session.  Every later operation raises :class:`NotReadyError`.

        An initialization still in flight is allowed to finish first.
        """
        if self._init_task is not None and not self._init_task.done():
            await asyncio.wait({self._init_task})
        self._state = StoreState.DISCONNECTED
        await self._session.close()

    async def __aenter__(self) -> HanaStore:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.disconnect()

    # ── Low-level SQL execution ──────────────────────────────

    async def _exec(self, sql: str, params: Sequence[Any] = ()) -> list[Row]:
        await self._ensure_ready()
        return await self._session.execute(sql, tuple(params))

    async def _count(self, where: str, params: Sequence[Any]) -> int:
        rows = await self._exec(f'SELECT COUNT(*) AS "CNT" FROM {self._table} WHERE {where}', params)
        if not rows:
            return 0
        return int(rows[0]["CNT"])

    # ── Store protocol ───────────────────────────────────────

    async def get(self, key: str) -> Any | None:
        rows = await self._exec(f'SELECT "VALUE" FROM {self._table} WHERE "ID" = ?', (key,))
        if not rows:
            return None
        return rows[0]["VALUE"]

    async def set(self, key: str, value: Any) -> None:
        await self._upsert(key, value)

    async def _upsert(self, key: str, value: Any) -> None:
        await self._exec(
            f'UPSERT {self._table} ("ID", "VALUE") VALUES (?, ?) WHERE "ID" = ?',
            (key, value, key),
        )

    async def delete(self, key: str) -> bool:
        if await self._count('"ID" = ?', (key,)) == 0:
            return False
        await self._exec(f'DELETE FROM {self._table} WHERE "ID" = ?', (key,))
        return True

    async def clear(self) -> None:
        await self._exec(
            f'DELETE FROM {self._table} WHERE "ID" LIKE ? {_ESCAPE_CLAUSE}',
            (build_prefix_pattern(self.namespace),),
        )

    async def get_many(self, keys: Sequence[str]) -> list[Any | None]:
        if not keys:
            return []
        rows = await self._exec(
            f'SELECT "ID", "VALUE" FROM {self._table} WHERE "ID" IN ({_placeholders(len(keys))})',
            keys,
        )
        found = {row["ID"]: row["VALUE"] for row in rows}
        return [found.get(key) for key in keys]

    async def set_many(self, entries: Iterable[Entry | Mapping[str, Any]]) -> None:
        for key, value in normalize_entries(entries):
            await self._upsert(key, value)

    async def delete_many(self, keys: Sequence[str]) -> bool:
        if not keys:
            return False
        in_clause = f'"ID" IN ({_placeholders(len(keys))})'
        if await self._count(in_clause, keys) == 0:
            return False
        await self._exec(f"DELETE FROM {self._table} WHERE {in_clause}", keys)
        return True

    async def has(self, key: str) -> bool:
        return await self._count('"ID" = ?', (key,)) > 0

    async def has_many(self, keys: Sequence[str]) -> list[bool]:
        if not keys:
            return []
        rows = await self._exec(
            f'SELECT "ID" FROM {self._table} WHERE "ID" IN ({_placeholders(len(keys))})',
            keys,
        )
        existing = {row["ID"] for row in rows}
        return [key in existing for key in keys]

    async def iterator(self, namespace: str | None = None) -> AsyncIterator[Entry]:
        """Yield ``(key, value)`` pairs under *namespace* in key order.

        Rows are fetched ``iteration_limit`` at a time using the last key
        seen as the cursor for the next batch.  The next batch is only
        requested once the current one has been consumed, and a short batch
        ends the iteration without an extra round trip.
        """
        limit = self.opts.iteration_limit
        pattern = build_prefix_pattern(namespace)
        select = f'SELECT "ID", "VALUE" FROM {self._table} WHERE "ID" LIKE ? {_ESCAPE_CLAUSE}'
        last_key: str | None = None

        while True:
            if last_key is None:
                rows = await self._exec(f'{select} ORDER BY "ID" LIMIT {limit}', (pattern,))
            else:
                rows = await self._exec(
                    f'{select} AND "ID" > ? ORDER BY "ID" LIMIT {limit}',
                    (pattern, last_key),
                )

            if not rows:
                return

            for row in rows:
                yield row["ID"], row["VALUE"]

            last_key = rows[-1]["ID"]
            if len(rows) < limit:
                return
