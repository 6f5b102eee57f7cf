"""Shared test fixtures."""

from typing import Any

import pytest

from fake_hana import FakeDatabase
from keyv_hana import HanaSession, HanaStore, HanaStoreOptions, InMemoryStore


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def make_hana_store(fake_db):
    def factory(namespace: str | None = None, **fields: Any) -> HanaStore:
        options = HanaStoreOptions(**fields)
        session = HanaSession(options.connect_kwargs(), driver=fake_db.driver)
        return HanaStore(options, namespace=namespace, session=session)

    return factory


@pytest.fixture
def hana_store(make_hana_store):
    return make_hana_store()


@pytest.fixture(params=["memory", "hana"])
def store(request, make_hana_store):
    if request.param == "memory":
        return InMemoryStore()
    return make_hana_store(iteration_limit=2)
