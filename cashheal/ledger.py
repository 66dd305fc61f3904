"""Ledger store: running balance, category buckets and the transaction log.

All public methods are coroutines. Each one runs inside its own storage
scope; callers that need several operations to land together use
:meth:`LedgerStore.atomic`, which hands out a :class:`LedgerUnit` bound to a
single exclusive write scope.
"""

from __future__ import annotations

import logging
import math
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, List, Optional, Union

from .config import (
    DEFAULT_BALANCE_CURRENT,
    DEFAULT_BALANCE_TOTAL,
    RECENT_TRANSACTIONS_LIMIT,
    SEED_CATEGORIES,
)
from .errors import CategoryNotFound, InvalidAmount
from .models import Balance, Category, Transaction, TransactionType
from .storage.base import LedgerBackend, LedgerSession

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def _finite(value: float) -> float:
    if value is None or isinstance(value, bool):
        raise InvalidAmount(value, "not a number")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidAmount(value, "not a number") from exc
    if not math.isfinite(number):
        raise InvalidAmount(value, "not a finite number")
    return number


def _validate_limit(limit: Optional[int]) -> None:
    if limit is None:
        return
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise ValueError(f"limit must be a non-negative integer, got {limit!r}")


class LedgerUnit:
    """Ledger operations sharing one storage scope."""

    def __init__(self, session: LedgerSession, clock: Clock):
        self._session = session
        self._clock = clock

    async def get_balance(self) -> Balance:
        balance = await self._session.get_balance()
        return balance if balance is not None else Balance(0.0, 0.0)

    async def set_balance(self, total: float, current: float) -> Balance:
        """Upsert the balance row. ``current`` is floored at zero."""
        total = _finite(total)
        if total < 0:
            raise InvalidAmount(total, "total must not be negative")
        current = max(0.0, _finite(current))
        changed = await self._session.update_balance(total, current)
        if changed == 0:
            await self._session.insert_balance(total, current)
        logger.debug("Balance set to total=%.2f current=%.2f", total, current)
        return Balance(total, current)

    async def get_categories(self) -> List[Category]:
        return await self._session.list_categories()

    async def get_category(self, key: str) -> Category:
        category = await self._session.get_category(key)
        if category is None:
            raise CategoryNotFound(key)
        return category

    async def update_category_amount(self, key: str, delta: float) -> Category:
        """Add ``delta`` to a category amount, clamping the result at zero."""
        delta = _finite(delta)
        category = await self.get_category(key)
        new_amount = max(0.0, category.amount + delta)
        await self._session.set_category_amount(key, new_amount)
        logger.debug("Category %s amount %.2f -> %.2f", key, category.amount, new_amount)
        return Category(
            id=category.id,
            key=category.key,
            label=category.label,
            amount=new_amount,
            color=category.color,
            emoji=category.emoji,
        )

    async def set_category_amount(self, key: str, amount: float) -> Category:
        """Overwrite a category amount, clamped at zero."""
        amount = _finite(amount)
        category = await self.get_category(key)
        return await self.update_category_amount(key, amount - category.amount)

    async def add_transaction(
        self,
        txn_type: Union[TransactionType, str],
        amount: float,
        category_key: Optional[str] = None,
    ) -> Transaction:
        txn_type = TransactionType(txn_type)
        amount = _finite(amount)
        if amount <= 0:
            raise InvalidAmount(amount)
        if txn_type is TransactionType.INCOME:
            category_key = None
        transaction = await self._session.insert_transaction(
            txn_type, category_key, amount, self._clock()
        )
        logger.debug("Appended %s transaction #%s of %.2f", txn_type.value, transaction.id, amount)
        return transaction

    async def get_transactions(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Transaction]:
        _validate_limit(limit)
        return await self._session.query_transactions(start=start, end=end, limit=limit)

    async def seed_defaults(self) -> bool:
        """Insert the default balance and categories where their tables are empty."""
        seeded = False
        if await self._session.count_balances() == 0:
            await self._session.insert_balance(DEFAULT_BALANCE_TOTAL, DEFAULT_BALANCE_CURRENT)
            seeded = True
        if await self._session.count_categories() == 0:
            for key, label, amount, color, emoji in SEED_CATEGORIES:
                await self._session.insert_category(key, label, amount, color, emoji)
            seeded = True
        return seeded


class LedgerStore:
    """Asynchronous CRUD surface over balance, categories and transactions.

    Args:
        backend: storage substrate, opened and closed by the owner of the store.
        clock: returns the current time in epoch milliseconds; injectable for tests.
    """

    def __init__(self, backend: LedgerBackend, clock: Optional[Clock] = None):
        self.backend = backend
        self.clock = clock or now_ms

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[LedgerUnit]:
        """Exclusive write scope; nothing written inside is kept if the block raises."""
        async with self.backend.transaction() as session:
            yield LedgerUnit(session, self.clock)

    @asynccontextmanager
    async def _read(self) -> AsyncIterator[LedgerUnit]:
        async with self.backend.snapshot() as session:
            yield LedgerUnit(session, self.clock)

    async def initialize(self) -> bool:
        """Seed default rows once. Safe to call repeatedly or concurrently.

        Returns True when this call inserted seed rows.
        """
        async with self.atomic() as unit:
            seeded = await unit.seed_defaults()
        if seeded:
            logger.info("Seeded default balance and categories")
        return seeded

    async def get_balance(self) -> Balance:
        async with self._read() as unit:
            return await unit.get_balance()

    async def set_balance(self, total: float, current: float) -> Balance:
        async with self.atomic() as unit:
            return await unit.set_balance(total, current)

    async def get_categories(self) -> List[Category]:
        async with self._read() as unit:
            return await unit.get_categories()

    async def get_category(self, key: str) -> Category:
        async with self._read() as unit:
            return await unit.get_category(key)

    async def update_category_amount(self, key: str, delta: float) -> Category:
        async with self.atomic() as unit:
            return await unit.update_category_amount(key, delta)

    async def set_category_amount(self, key: str, amount: float) -> Category:
        async with self.atomic() as unit:
            return await unit.set_category_amount(key, amount)

    async def add_transaction(
        self,
        txn_type: Union[TransactionType, str],
        amount: float,
        category_key: Optional[str] = None,
    ) -> Transaction:
        async with self.atomic() as unit:
            return await unit.add_transaction(txn_type, amount, category_key)

    async def get_transactions(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Transaction]:
        """Transactions newest first; ``start``/``end`` are inclusive epoch-ms bounds."""
        async with self._read() as unit:
            return await unit.get_transactions(start=start, end=end, limit=limit)

    async def get_recent_transactions(self, limit: int = RECENT_TRANSACTIONS_LIMIT) -> List[Transaction]:
        return await self.get_transactions(limit=limit)
