"""Configuration models for the HANA store.

``HanaStoreOptions`` is the validated option set a :class:`HanaStore` is
built from.  ``HanaSettings`` loads the same options from ``HANA_*``
environment variables (or a ``.env`` file) for deployments that configure
the store through the environment.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TABLE = "KEYV"
DEFAULT_KEY_SIZE = 255
DEFAULT_ITERATION_LIMIT = 10


class HanaStoreOptions(BaseModel):
    """Options recognised by :class:`~keyv_hana.stores.hana.HanaStore`.

    Attributes:
        host: Database host name.
        port: SQL port of the tenant database.
        user: Database user.
        password: Password for *user*.
        schema_name: Schema holding the table (alias ``schema``).  Defaults
            to the session's current schema.
        table: Table name.
        key_size: Width of the ``ID`` column, and so the longest composite id.
        iteration_limit: Rows fetched per iterator batch.  Anything that is
            not a positive integer falls back to the default.
        create_table: Create the table on connect.  Disable when the schema
            is managed elsewhere (e.g. an HDI ``.hdbtable`` artifact).
        connect_options: Extra keyword arguments for ``dbapi.connect``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = Field(default=None, repr=False)
    schema_name: str | None = Field(default=None, alias="schema")
    table: str = DEFAULT_TABLE
    key_size: int = Field(default=DEFAULT_KEY_SIZE, ge=1)
    iteration_limit: int = DEFAULT_ITERATION_LIMIT
    create_table: bool = True
    connect_options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("iteration_limit", mode="before")
    @classmethod
    def _fallback_iteration_limit(cls, value: Any) -> int:
        try:
            limit = int(value)
        except (TypeError, ValueError):
            return DEFAULT_ITERATION_LIMIT
        return limit if limit > 0 else DEFAULT_ITERATION_LIMIT

    def connect_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``hdbcli.dbapi.connect``.

        Explicit options win over the same keys in ``connect_options``.
        """
        kwargs = dict(self.connect_options)
        if self.host is not None:
            kwargs["address"] = self.host
        if self.port is not None:
            kwargs["port"] = self.port
        if self.user is not None:
            kwargs["user"] = self.user
        if self.password is not None:
            kwargs["password"] = self.password
        return kwargs


class HanaSettings(BaseSettings):
    """Store options read from ``HANA_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HANA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = Field(default=None, repr=False)
    schema_name: str | None = Field(
        default=None,
        validation_alias="HANA_SCHEMA",
    )
    table: str = DEFAULT_TABLE
    key_size: int = Field(default=DEFAULT_KEY_SIZE, ge=1)
    iteration_limit: int = DEFAULT_ITERATION_LIMIT
    create_table: bool = True

    def to_options(self, **overrides: Any) -> HanaStoreOptions:
        data = self.model_dump()
        data.update(overrides)
        return HanaStoreOptions.model_validate(data)
