"""Income/expense recording: consistency across balance, categories and log."""

from __future__ import annotations

import asyncio

import pytest

from cashheal.errors import CategoryNotFound, CategoryRequired, InvalidAmount, StorageFailure
from cashheal.ledger import LedgerUnit
from cashheal.models import Balance, TransactionType
from cashheal.recorder import TransactionRecorder

from conftest import open_store


async def _state(store):
    balance = await store.get_balance()
    amounts = {c.key: c.amount for c in await store.get_categories()}
    transactions = await store.get_transactions()
    return balance, amounts, transactions


@pytest.mark.asyncio
async def test_expense_updates_category_balance_and_log(backend, clock):
    store = await open_store(backend, clock=clock)
    recorder = TransactionRecorder(store)

    result = await recorder.record_expense(20, 'food')

    balance, amounts, transactions = await _state(store)
    assert balance == Balance(350.0, 130.0)
    assert amounts['food'] == 40.0
    assert len(transactions) == 1
    txn = transactions[0]
    assert (txn.type, txn.category_key, txn.amount) == (TransactionType.EXPENSE, 'food', 20.0)
    assert result.transaction == txn
    assert result.balance == balance
    assert result.category.amount == 40.0


@pytest.mark.asyncio
async def test_expense_floors_current_balance_at_zero(backend):
    store = await open_store(backend)
    await store.set_balance(350, 10)
    recorder = TransactionRecorder(store)

    await recorder.record_expense(50, 'fun')
    assert await store.get_balance() == Balance(350.0, 0.0)

    await recorder.record_expense(5, 'fun')
    assert await store.get_balance() == Balance(350.0, 0.0)


@pytest.mark.asyncio
async def test_income_raises_total_and_current_only(backend):
    store = await open_store(backend)
    recorder = TransactionRecorder(store)
    before = {c.key: c.amount for c in await store.get_categories()}

    result = await recorder.record_income("100")

    balance, amounts, transactions = await _state(store)
    assert balance == Balance(450.0, 250.0)
    assert amounts == before
    assert [(t.type, t.category_key, t.amount) for t in transactions] == [
        (TransactionType.INCOME, None, 100.0)
    ]
    assert result.category is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "amount, category, error",
    [
        ("0", 'food', InvalidAmount),
        ("abc", 'food', InvalidAmount),
        (-5, 'food', InvalidAmount),
        (10, None, CategoryRequired),
        (10, '  ', CategoryRequired),
        (10, 'rockets', CategoryNotFound),
    ],
)
async def test_rejected_expense_leaves_ledger_untouched(backend, amount, category, error):
    store = await open_store(backend)
    recorder = TransactionRecorder(store)
    before = await _state(store)

    with pytest.raises(error):
        await recorder.record_expense(amount, category)

    assert await _state(store) == before


@pytest.mark.asyncio
async def test_rejected_income_leaves_ledger_untouched(backend):
    store = await open_store(backend)
    recorder = TransactionRecorder(store)
    before = await _state(store)
    with pytest.raises(InvalidAmount):
        await recorder.record_income(0)
    assert await _state(store) == before


@pytest.mark.asyncio
async def test_failure_while_appending_rolls_back_everything(backend, monkeypatch):
    store = await open_store(backend)
    recorder = TransactionRecorder(store)
    before = await _state(store)

    async def broken_append(self, *args, **kwargs):
        raise StorageFailure("disk full")

    monkeypatch.setattr(LedgerUnit, 'add_transaction', broken_append)

    with pytest.raises(StorageFailure):
        await recorder.record_expense(20, 'food')
    with pytest.raises(StorageFailure):
        await recorder.record_income(20)

    monkeypatch.undo()
    assert await _state(store) == before


@pytest.mark.asyncio
async def test_interleaved_recordings_all_apply(backend):
    store = await open_store(backend)
    recorder = TransactionRecorder(store)
    await asyncio.gather(
        *(recorder.record_expense(1, 'food') for _ in range(10)),
        *(recorder.record_income(2) for _ in range(5)),
    )
    balance, amounts, transactions = await _state(store)
    assert amounts['food'] == 30.0
    assert balance == Balance(360.0, 150.0)
    assert len(transactions) == 15
