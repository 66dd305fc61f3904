"""Shared fixtures: every ledger/key-value test runs against both backends."""

from __future__ import annotations

import pytest

from cashheal.ledger import LedgerStore
from cashheal.storage import (
    JsonKeyValueStore,
    JsonLedgerBackend,
    SqliteKeyValueStore,
    SqliteLedgerBackend,
)


class FakeClock:
    """Manually advanced epoch-ms clock."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(params=['sqlite', 'json'])
def backend(request, tmp_path):
    if request.param == 'sqlite':
        return SqliteLedgerBackend(tmp_path / 'cashheal.db')
    return JsonLedgerBackend(tmp_path / 'ledger.json')


@pytest.fixture(params=['sqlite', 'json'])
def kv(request, tmp_path):
    if request.param == 'sqlite':
        return SqliteKeyValueStore(tmp_path / 'cashheal.db')
    return JsonKeyValueStore(tmp_path / 'preferences.json')


async def open_store(backend, clock=None, initialize=True) -> LedgerStore:
    await backend.open()
    store = LedgerStore(backend, clock=clock)
    if initialize:
        await store.initialize()
    return store
