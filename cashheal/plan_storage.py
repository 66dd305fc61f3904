"""Persistence for the budget advisor plan and per-period budget targets.

The questionnaire plan and the manually edited targets are independent
caches; saving one never touches the other.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .amounts import parse_amount
from .config import DEFAULT_BUDGET_TARGETS
from .ledger import now_ms
from .models import BudgetPeriod, BudgetPlan, SavingsStrategy
from .storage.base import KeyValueStore

logger = logging.getLogger(__name__)

PLAN_KEY = 'budget_advisor_plan'
TARGET_KEY_PREFIX = 'budget_target_'
PLAN_VERSION = 1


@dataclass(frozen=True)
class SavedPlan:
    plan: BudgetPlan
    timestamp: int
    strategy: Optional[SavingsStrategy] = None


def _period(period: Union[BudgetPeriod, str]) -> BudgetPeriod:
    try:
        return BudgetPeriod(period)
    except ValueError as exc:
        choices = ', '.join(p.value for p in BudgetPeriod)
        raise ValueError(f"Unknown budget period '{period}'. Expected one of: {choices}") from exc


class BudgetPlanStore:
    """Keyed-blob storage for the latest plan and the period targets."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    async def save_plan(
        self,
        plan: BudgetPlan,
        timestamp: Optional[int] = None,
        strategy: Optional[Union[SavingsStrategy, str]] = None,
    ) -> SavedPlan:
        """Replace the stored plan wholesale."""
        saved = SavedPlan(
            plan=plan,
            timestamp=int(timestamp) if timestamp is not None else now_ms(),
            strategy=SavingsStrategy(strategy) if strategy is not None else None,
        )
        payload = {
            'plan': plan.to_dict(),
            'timestamp': saved.timestamp,
            'strategy': saved.strategy.value if saved.strategy else None,
            'version': PLAN_VERSION,
        }
        await self.kv.set(PLAN_KEY, json.dumps(payload, sort_keys=True))
        logger.info("Saved budget plan (available %.2f)", plan.available_for_spending)
        return saved

    async def load_plan(self) -> Optional[SavedPlan]:
        """Return the stored plan, or None when absent or unreadable."""
        raw = await self.kv.get(PLAN_KEY)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            plan = BudgetPlan.from_dict(data['plan'])
            strategy = data.get('strategy')
            return SavedPlan(
                plan=plan,
                timestamp=int(data.get('timestamp') or 0),
                strategy=SavingsStrategy(strategy) if strategy else None,
            )
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring unreadable budget plan: %s", exc)
            return None

    async def clear_plan(self) -> None:
        await self.kv.remove(PLAN_KEY)

    async def get_budget_target(self, period: Union[BudgetPeriod, str]) -> float:
        period = _period(period)
        default = DEFAULT_BUDGET_TARGETS[period.value]
        raw = await self.kv.get(TARGET_KEY_PREFIX + period.value)
        if raw is None:
            return default
        try:
            value = float(json.loads(raw))
        except (json.JSONDecodeError, TypeError, ValueError) as exc:
            logger.warning("Ignoring unreadable %s target: %s", period.value, exc)
            return default
        if not math.isfinite(value) or value < 0:
            logger.warning("Ignoring invalid %s target %r", period.value, value)
            return default
        return value

    async def set_budget_target(self, period: Union[BudgetPeriod, str], value: Any) -> float:
        period = _period(period)
        number = parse_amount(value, allow_zero=True)
        await self.kv.set(TARGET_KEY_PREFIX + period.value, json.dumps(number))
        return number

    async def get_budget_targets(self) -> Dict[BudgetPeriod, float]:
        return {period: await self.get_budget_target(period) for period in BudgetPeriod}
