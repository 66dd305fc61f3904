"""Flat JSON-file implementation of the storage interfaces.

Used where no relational store is wanted. The whole ledger is one JSON
document. A write scope edits an in-memory copy which replaces the file
atomically (temp file + :func:`os.replace`) only when the scope exits
without error, so readers see either the old or the new document.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional, Union

from ..errors import StorageFailure
from ..models import Balance, Category, Transaction, TransactionType
from .base import KeyValueStore, LedgerBackend, LedgerSession

logger = logging.getLogger(__name__)


def _empty_document() -> Dict[str, Any]:
    return {
        'balance': None,
        'categories': [],
        'transactions': [],
        'next_ids': {'category': 1, 'transaction': 1},
    }


def _write_atomic(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + '.tmp')
    try:
        with tmp.open('w', encoding='utf-8') as handle:
            json.dump(payload, handle, indent=2, sort_keys=True, ensure_ascii=False)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def _category_from_dict(data: Dict[str, Any]) -> Category:
    return Category(
        id=data.get('id'),
        key=data['key'],
        label=data['label'],
        amount=float(data['amount']),
        color=data['color'],
        emoji=data['emoji'],
    )


def _transaction_from_dict(data: Dict[str, Any]) -> Transaction:
    return Transaction(
        id=int(data['id']),
        type=TransactionType(data['type']),
        category_key=data.get('category_key'),
        amount=float(data['amount']),
        created_at=int(data['created_at']),
    )


class _JsonSession(LedgerSession):
    def __init__(self, document: Dict[str, Any]):
        self.document = document
        self.dirty = False

    def _find_category(self, key: str) -> Optional[Dict[str, Any]]:
        for entry in self.document['categories']:
            if entry['key'] == key:
                return entry
        return None

    def _next_id(self, kind: str) -> int:
        ids = self.document.setdefault('next_ids', {})
        value = int(ids.get(kind, 1))
        ids[kind] = value + 1
        return value

    async def count_balances(self) -> int:
        return 0 if self.document.get('balance') is None else 1

    async def get_balance(self) -> Optional[Balance]:
        data = self.document.get('balance')
        if data is None:
            return None
        return Balance(total=float(data['total']), current=float(data['current']))

    async def insert_balance(self, total: float, current: float) -> None:
        if self.document.get('balance') is not None:
            raise StorageFailure("Balance row already exists")
        self.document['balance'] = {'total': total, 'current': current}
        self.dirty = True

    async def update_balance(self, total: float, current: float) -> int:
        if self.document.get('balance') is None:
            return 0
        self.document['balance'] = {'total': total, 'current': current}
        self.dirty = True
        return 1

    async def count_categories(self) -> int:
        return len(self.document['categories'])

    async def list_categories(self) -> List[Category]:
        return [_category_from_dict(entry) for entry in self.document['categories']]

    async def get_category(self, key: str) -> Optional[Category]:
        entry = self._find_category(key)
        return _category_from_dict(entry) if entry is not None else None

    async def insert_category(self, key: str, label: str, amount: float, color: str, emoji: str) -> None:
        if self._find_category(key) is not None:
            return
        self.document['categories'].append({
            'id': self._next_id('category'),
            'key': key,
            'label': label,
            'amount': amount,
            'color': color,
            'emoji': emoji,
        })
        self.dirty = True

    async def set_category_amount(self, key: str, amount: float) -> int:
        entry = self._find_category(key)
        if entry is None:
            return 0
        entry['amount'] = amount
        self.dirty = True
        return 1

    async def insert_transaction(
        self,
        txn_type: TransactionType,
        category_key: Optional[str],
        amount: float,
        created_at: int,
    ) -> Transaction:
        record = {
            'id': self._next_id('transaction'),
            'type': TransactionType(txn_type).value,
            'category_key': category_key,
            'amount': amount,
            'created_at': created_at,
        }
        self.document['transactions'].append(record)
        self.dirty = True
        return _transaction_from_dict(record)

    async def query_transactions(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Transaction]:
        records = [_transaction_from_dict(entry) for entry in self.document['transactions']]
        if start is not None:
            records = [t for t in records if t.created_at >= start]
        if end is not None:
            records = [t for t in records if t.created_at <= end]
        records.sort(key=lambda t: (t.created_at, t.id), reverse=True)
        if limit is not None:
            records = records[:limit]
        return records


class JsonLedgerBackend(LedgerBackend):
    """Ledger kept in a single JSON document."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._write_lock = asyncio.Lock()
        self._opened = False

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return _empty_document()
        try:
            with self.path.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise StorageFailure(f"Ledger file {self.path} is corrupted: {exc}") from exc
        except OSError as exc:
            raise StorageFailure(f"Could not read ledger file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageFailure(f"Ledger file {self.path} does not contain a JSON object")
        document = _empty_document()
        document.update(data)
        return document

    def _save(self, document: Dict[str, Any]) -> None:
        try:
            _write_atomic(self.path, document)
        except OSError as exc:
            raise StorageFailure(f"Failed to write ledger file {self.path}: {exc}") from exc

    def _open(self) -> None:
        document = self._load()
        if not self.path.exists():
            self._save(document)

    async def open(self) -> None:
        await asyncio.to_thread(self._open)
        self._opened = True
        logger.info("Opened JSON ledger at %s", self.path)

    async def close(self) -> None:
        self._opened = False
        logger.info("Closed JSON ledger at %s", self.path)

    def _require_open(self) -> None:
        if not self._opened:
            raise StorageFailure(f"Ledger file {self.path} is not open")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[LedgerSession]:
        self._require_open()
        async with self._write_lock:
            session = _JsonSession(await asyncio.to_thread(self._load))
            yield session
            if session.dirty:
                await asyncio.to_thread(self._save, session.document)

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[LedgerSession]:
        self._require_open()
        yield _JsonSession(await asyncio.to_thread(self._load))


class JsonKeyValueStore(KeyValueStore):
    """Key-value pairs kept in one JSON object on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring corrupted preferences file %s: %s", self.path, exc)
            return {}
        except OSError as exc:
            raise StorageFailure(f"Could not read preferences file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            logger.warning("Ignoring preferences file %s: not a JSON object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: Dict[str, str]) -> None:
        try:
            _write_atomic(self.path, data)
        except OSError as exc:
            raise StorageFailure(f"Failed to write preferences file {self.path}: {exc}") from exc

    async def get(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._load)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            data[key] = value
            await asyncio.to_thread(self._save, data)

    async def remove(self, key: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            if key not in data:
                return
            del data[key]
            await asyncio.to_thread(self._save, data)
