import pytest

from cashheal.formatting import format_currency
from cashheal.settings import CURRENCY_KEY, SettingsStore


@pytest.mark.asyncio
async def test_defaults(kv):
    await kv.open()
    settings = SettingsStore(kv)
    assert await settings.get_currency() == 'EUR'
    assert await settings.get_language() == 'fr'
    assert await settings.has_completed_onboarding() is False


@pytest.mark.asyncio
async def test_currency_and_language_round_trip(kv):
    await kv.open()
    settings = SettingsStore(kv)
    assert await settings.set_currency('usd') == 'USD'
    assert await settings.set_language('EN') == 'en'
    assert await settings.get_currency() == 'USD'
    assert await settings.get_language() == 'en'


@pytest.mark.asyncio
async def test_unsupported_values_rejected(kv):
    await kv.open()
    settings = SettingsStore(kv)
    with pytest.raises(ValueError):
        await settings.set_currency('BTC')
    with pytest.raises(ValueError):
        await settings.set_language('klingon')


@pytest.mark.asyncio
async def test_unsupported_stored_currency_falls_back(kv):
    await kv.open()
    await kv.set(CURRENCY_KEY, 'DOGE')
    assert await SettingsStore(kv).get_currency() == 'EUR'


@pytest.mark.asyncio
async def test_onboarding_flag(kv):
    await kv.open()
    settings = SettingsStore(kv)
    await settings.complete_onboarding()
    assert await settings.has_completed_onboarding() is True


@pytest.mark.parametrize(
    "amount, code, expected",
    [
        (1234.5, 'USD', '$1,234.50'),
        (1234.5, 'EUR', '1,234.50 €'),
        (3, 'GBP', '£3.00'),
        (-3, 'GBP', '-£3.00'),
        (1500, 'XOF', '1,500 F CFA'),
        (10, 'JPY', '10.00 JPY'),
    ],
)
def test_format_currency(amount, code, expected):
    assert format_currency(amount, code) == expected
