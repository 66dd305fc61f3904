"""Write path for income and expense actions.

Every action is validated before storage is touched, then applied as one
unit: category amount, balance and transaction log change together or not
at all.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .amounts import parse_amount
from .errors import CategoryRequired
from .ledger import LedgerStore
from .models import Balance, Category, Transaction, TransactionType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordResult:
    """State of the ledger right after a recorded action."""

    transaction: Transaction
    balance: Balance
    category: Optional[Category] = None


class TransactionRecorder:
    """Records income and expenses against a :class:`LedgerStore`."""

    def __init__(self, store: LedgerStore):
        self.store = store

    async def record_income(self, amount: Any) -> RecordResult:
        """Add funds: both ``total`` and ``current`` grow; categories are untouched."""
        value = parse_amount(amount)
        async with self.store.atomic() as ledger:
            balance = await ledger.get_balance()
            new_balance = await ledger.set_balance(balance.total + value, balance.current + value)
            transaction = await ledger.add_transaction(TransactionType.INCOME, value)
        logger.info("Recorded income of %.2f", value)
        return RecordResult(transaction=transaction, balance=new_balance)

    async def record_expense(self, amount: Any, category_key: Optional[str]) -> RecordResult:
        """Spend from a category.

        Raises :class:`InvalidAmount`, :class:`CategoryRequired` or
        :class:`CategoryNotFound`. ``current`` is floored at zero and
        ``total`` is left unchanged.
        """
        value = parse_amount(amount)
        if category_key is None or not str(category_key).strip():
            raise CategoryRequired()
        key = str(category_key).strip()

        async with self.store.atomic() as ledger:
            category = await ledger.update_category_amount(key, value)
            balance = await ledger.get_balance()
            new_balance = await ledger.set_balance(balance.total, max(0.0, balance.current - value))
            transaction = await ledger.add_transaction(TransactionType.EXPENSE, value, key)
        logger.info("Recorded expense of %.2f in %s", value, key)
        return RecordResult(transaction=transaction, balance=new_balance, category=category)
