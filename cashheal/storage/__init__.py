"""Storage substrates for the ledger and keyed preferences.

Two interchangeable implementations of the same interfaces:

* ``sqlite_backend`` – relational store with native exclusive transactions
* ``json_backend`` – flat JSON files written atomically
"""

from .base import KeyValueStore, LedgerBackend, LedgerSession
from .json_backend import JsonKeyValueStore, JsonLedgerBackend
from .sqlite_backend import SqliteKeyValueStore, SqliteLedgerBackend

__all__ = [
    'KeyValueStore',
    'LedgerBackend',
    'LedgerSession',
    'JsonKeyValueStore',
    'JsonLedgerBackend',
    'SqliteKeyValueStore',
    'SqliteLedgerBackend',
]
