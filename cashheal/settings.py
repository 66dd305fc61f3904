"""User preferences: display currency, interface language and onboarding state."""

from __future__ import annotations

import logging

from .config import DEFAULT_CURRENCY, DEFAULT_LANGUAGE
from .storage.base import KeyValueStore

logger = logging.getLogger(__name__)

SUPPORTED_CURRENCIES = ("EUR", "USD", "GBP", "CAD", "CNY", "XOF")
SUPPORTED_LANGUAGES = ("fr", "en", "es", "pt", "zh", "ja")

CURRENCY_KEY = 'currency'
LANGUAGE_KEY = 'app_language'
ONBOARDING_KEY = 'has_completed_onboarding'


class SettingsStore:
    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    async def get_currency(self) -> str:
        stored = await self.kv.get(CURRENCY_KEY)
        if stored is None:
            return DEFAULT_CURRENCY
        if stored not in SUPPORTED_CURRENCIES:
            logger.warning("Unsupported stored currency %r, using %s", stored, DEFAULT_CURRENCY)
            return DEFAULT_CURRENCY
        return stored

    async def set_currency(self, code: str) -> str:
        code = (code or '').strip().upper()
        if code not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency '{code}'. Expected one of: {', '.join(SUPPORTED_CURRENCIES)}")
        await self.kv.set(CURRENCY_KEY, code)
        return code

    async def get_language(self) -> str:
        stored = await self.kv.get(LANGUAGE_KEY)
        if stored is None:
            return DEFAULT_LANGUAGE
        if stored not in SUPPORTED_LANGUAGES:
            logger.warning("Unsupported stored language %r, using %s", stored, DEFAULT_LANGUAGE)
            return DEFAULT_LANGUAGE
        return stored

    async def set_language(self, language: str) -> str:
        language = (language or '').strip().lower()
        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language '{language}'. Expected one of: {', '.join(SUPPORTED_LANGUAGES)}")
        await self.kv.set(LANGUAGE_KEY, language)
        return language

    async def has_completed_onboarding(self) -> bool:
        return (await self.kv.get(ONBOARDING_KEY)) == 'true'

    async def complete_onboarding(self) -> None:
        await self.kv.set(ONBOARDING_KEY, 'true')
