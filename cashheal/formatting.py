"""Formatting utilities for currency display.

Presentation only: stored amounts never depend on the selected currency.
"""

from __future__ import annotations

from typing import Union

CURRENCY_SYMBOLS = {
    'EUR': '€',
    'USD': '$',
    'GBP': '£',
    'CAD': 'CA$',
    'CNY': '¥',
    'XOF': 'F CFA',
}

# Currencies written after the number, with a space
_SUFFIX_CURRENCIES = {'EUR', 'XOF'}
# Currencies without minor units
_ZERO_DECIMAL_CURRENCIES = {'XOF'}


def format_currency(amount: Union[float, int], currency_code: str = 'EUR') -> str:
    """Format an amount in the given currency.

    Args:
        amount: The amount to format
        currency_code: ISO code; unknown codes are printed as a suffix

    Returns:
        Formatted currency string

    Example:
        >>> format_currency(1234.5, 'USD')
        '$1,234.50'
        >>> format_currency(1234.5, 'EUR')
        '1,234.50 €'
        >>> format_currency(-3, 'GBP')
        '-£3.00'
    """
    code = (currency_code or '').upper()
    decimals = 0 if code in _ZERO_DECIMAL_CURRENCIES else 2
    number = f"{abs(float(amount)):,.{decimals}f}"
    sign = '-' if float(amount) < 0 and float(number.replace(',', '')) != 0 else ''
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol is None:
        return f"{sign}{number} {code}".rstrip()
    if code in _SUFFIX_CURRENCIES:
        return f"{sign}{number} {symbol}"
    return f"{sign}{symbol}{number}"
