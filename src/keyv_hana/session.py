"""HanaSession — one guarded ``hdbcli`` connection shared by a store."""

from __future__ import annotations

import asyncio
import logging
from types import ModuleType
from typing import Any

from hdbcli import dbapi

from keyv_hana.exceptions import ExecutionError, NotReadyError

_logger = logging.getLogger(__name__)

Row = dict[str, Any]


def error_code(exc: BaseException) -> int | None:
    """Return the HANA error code carried by a driver exception, if any."""
    code = getattr(exc, "errorcode", None)
    if code is None and exc.args and isinstance(exc.args[0], int):
        code = exc.args[0]
    return code


def _materialize(value: Any) -> Any:
    # LOB columns may come back as lazy locators; read them while the
    # cursor is still open.
    read = getattr(value, "read", None)
    if callable(read):
        return read()
    return value


async def _wait_for_worker(task: asyncio.Future[Any]) -> Any:
    """Await a worker-thread *task*, holding the caller until the thread returns.

    A blocking driver call cannot be interrupted.  On cancellation the
    caller keeps waiting for the worker (so the session lock is not
    released mid-statement) and then re-raises ``CancelledError``.
    """
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        while not task.done():
            try:
                await asyncio.wait({task})
            except asyncio.CancelledError:
                continue
        if not task.cancelled() and task.exception() is not None:
            _logger.debug("Abandoned driver call failed: %r", task.exception())
        raise


class HanaSession:
    """Owns exactly one database connection and serializes access to it.

    ``hdbcli`` is a blocking driver, so every call runs in a worker thread
    while ``_lock`` is held, and the lock stays held until the thread returns
    even if the awaiting caller is cancelled.  Concurrent callers interleave
    at whole-statement granularity, never inside a statement.

    Parameters:
        connect_kwargs: Keyword arguments for ``driver.connect``.
        driver: DB-API module providing ``connect`` and ``Error``.  Defaults
                to ``hdbcli.dbapi``.
    """

    def __init__(
        self,
        connect_kwargs: dict[str, Any] | None = None,
        *,
        driver: ModuleType | Any = dbapi,
    ) -> None:
        self._connect_kwargs = dict(connect_kwargs or {})
        self._driver = driver
        self._conn: Any = None
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def driver_error(self) -> type[BaseException]:
        error: type[BaseException] = self._driver.Error
        return error

    async def open(self) -> None:
        """Establish the connection.  Driver errors propagate unchanged."""
        async with self._lock:
            if self._conn is not None:
                return
            _logger.debug(
                "Connecting to %s:%s",
                self._connect_kwargs.get("address", "<default>"),
                self._connect_kwargs.get("port", "<default>"),
            )
            task = asyncio.ensure_future(
                asyncio.to_thread(self._driver.connect, **self._connect_kwargs)
            )
            try:
                self._conn = await _wait_for_worker(task)
            except asyncio.CancelledError:
                # Keep a connection that arrived after cancellation so close() releases it.
                if not task.cancelled() and task.exception() is None:
                    self._conn = task.result()
                raise

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> list[Row]:
        """Run one parameterized statement and return its rows.

        Rows are dicts keyed by column label.  Statements without a result
        set return an empty list.  Driver failures are raised as
        :class:`ExecutionError`.
        """
        async with self._lock:
            conn = self._conn
            if conn is None:
                raise NotReadyError()
            _logger.debug("Executing %s with %d parameter(s)", sql, len(params))
            try:
                return await _wait_for_worker(
                    asyncio.ensure_future(
                        asyncio.to_thread(self._execute_sync, conn, sql, tuple(params))
                    )
                )
            except self.driver_error as exc:
                raise ExecutionError(sql, str(exc), error_code(exc)) from exc

    @staticmethod
    def _execute_sync(conn: Any, sql: str, params: tuple[Any, ...]) -> list[Row]:
        cursor = conn.cursor()
        try:
            if params:
                cursor.execute(sql, params)
            else:
                cursor.execute(sql)
            if not cursor.description:
                return []
            columns = [column[0] for column in cursor.description]
            return [
                {name: _materialize(value) for name, value in zip(columns, row)}
                for row in cursor.fetchall()
            ]
        finally:
            cursor.close()

    async def close(self) -> None:
        """Close the connection.  Safe to call when already closed."""
        async with self._lock:
            conn, self._conn = self._conn, None
            if conn is not None:
                await _wait_for_worker(asyncio.ensure_future(asyncio.to_thread(conn.close)))
                _logger.debug("Connection closed")
