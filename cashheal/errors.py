"""Exception types raised by the ledger, recorder and budget advisor."""

from __future__ import annotations


class CashHealError(Exception):
    """Base class for all CashHeal errors."""


class InvalidAmount(CashHealError, ValueError):
    """An amount is non-positive, non-numeric or could not be parsed."""

    def __init__(self, value: object, reason: str = "amount must be a positive number"):
        self.value = value
        super().__init__(f"Invalid amount {value!r}: {reason}")


class CategoryRequired(CashHealError, ValueError):
    """An expense was submitted without a category."""

    def __init__(self) -> None:
        super().__init__("An expense must reference a category")


class CategoryNotFound(CashHealError, KeyError):
    """A category key does not exist in the category set."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Unknown category '{self.key}'"


class StorageFailure(CashHealError, OSError):
    """The underlying storage rejected a read or write."""
