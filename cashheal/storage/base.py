"""Abstract storage interfaces.

Business logic only ever talks to these interfaces. The concrete backend is
picked once at composition time (see :func:`cashheal.app.open_app`).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncContextManager, List, Optional

from ..models import Balance, Category, Transaction, TransactionType


class LedgerSession(ABC):
    """Table-style primitives available inside one storage scope.

    A session obtained from :meth:`LedgerBackend.transaction` sees its own
    writes; none of them are visible to other scopes until it exits cleanly.
    """

    @abstractmethod
    async def count_balances(self) -> int: ...

    @abstractmethod
    async def get_balance(self) -> Optional[Balance]: ...

    @abstractmethod
    async def insert_balance(self, total: float, current: float) -> None: ...

    @abstractmethod
    async def update_balance(self, total: float, current: float) -> int:
        """Update the singleton balance row and return the number of rows changed."""

    @abstractmethod
    async def count_categories(self) -> int: ...

    @abstractmethod
    async def list_categories(self) -> List[Category]:
        """Return categories in insertion order."""

    @abstractmethod
    async def get_category(self, key: str) -> Optional[Category]: ...

    @abstractmethod
    async def insert_category(self, key: str, label: str, amount: float, color: str, emoji: str) -> None: ...

    @abstractmethod
    async def set_category_amount(self, key: str, amount: float) -> int:
        """Overwrite a category amount and return the number of rows changed."""

    @abstractmethod
    async def insert_transaction(
        self,
        txn_type: TransactionType,
        category_key: Optional[str],
        amount: float,
        created_at: int,
    ) -> Transaction: ...

    @abstractmethod
    async def query_transactions(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Transaction]:
        """Return transactions newest first, ``start``/``end`` inclusive."""


class LedgerBackend(ABC):
    """Storage substrate for balance, categories and transactions."""

    @abstractmethod
    async def open(self) -> None:
        """Prepare the substrate (create schema, files)."""

    @abstractmethod
    async def close(self) -> None: ...

    @abstractmethod
    def transaction(self) -> AsyncContextManager[LedgerSession]:
        """Exclusive write scope; rolled back if the block raises."""

    @abstractmethod
    def snapshot(self) -> AsyncContextManager[LedgerSession]:
        """Read scope over committed data only."""


class KeyValueStore(ABC):
    """String key-value storage for preferences and keyed blobs."""

    async def open(self) -> None:
        return None

    async def close(self) -> None:
        return None

    @abstractmethod
    async def get(self, key: str) -> Optional[str]: ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    async def remove(self, key: str) -> None: ...
