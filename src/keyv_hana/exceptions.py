"""Custom exceptions for the keyv_hana package."""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for all store errors."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        msg = f"Store error during '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class HanaConnectionError(StoreError):
    """Raised when the database session cannot be established."""

    def __init__(self, detail: str = "") -> None:
        super().__init__("connect", detail)


class ProvisioningError(StoreError):
    """Raised when the backing table cannot be created."""

    def __init__(self, table: str, detail: str = "") -> None:
        self.table = table
        super().__init__("provision", f"table {table}: {detail}" if detail else f"table {table}")


class ExecutionError(StoreError):
    """Raised when a single SQL statement fails.

    The store stays usable after an ``ExecutionError``; only the call that
    issued the statement fails.
    """

    def __init__(self, sql: str, detail: str = "", errorcode: int | None = None) -> None:
        self.sql = sql
        self.errorcode = errorcode
        super().__init__("execute", detail)


class NotReadyError(StoreError):
    """Raised when an operation runs after a failed initialization or a disconnect."""

    def __init__(self, detail: str = "connection unavailable") -> None:
        super().__init__("ready", detail)
