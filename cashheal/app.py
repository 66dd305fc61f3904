"""Composition root.

:func:`open_app` picks the storage backend, opens it, seeds the ledger and
wires the stores together. The returned :class:`AppContext` is passed to
whatever drives the application (dashboard, scripts, tests) and must be
closed at shutdown; :func:`app_session` does both.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Optional, Tuple, Union

from . import config
from .analytics import MS_PER_DAY, period_spending
from .budget_engine import build_questionnaire_input, compute, progress_ratio, remaining_budget
from .ledger import Clock, LedgerStore
from .models import BudgetPeriod, SavingsStrategy
from .plan_storage import BudgetPlanStore, SavedPlan
from .recorder import TransactionRecorder
from .settings import SettingsStore
from .storage import (
    JsonKeyValueStore,
    JsonLedgerBackend,
    KeyValueStore,
    LedgerBackend,
    SqliteKeyValueStore,
    SqliteLedgerBackend,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class AppContext:
    backend_name: str
    ledger_backend: LedgerBackend
    kv: KeyValueStore
    store: LedgerStore
    recorder: TransactionRecorder
    plans: BudgetPlanStore
    settings: SettingsStore

    async def close(self) -> None:
        await self.kv.close()
        await self.ledger_backend.close()


@dataclass(frozen=True)
class PeriodOverview:
    period: BudgetPeriod
    target: float
    plan_budget: Optional[float]
    budget: float
    spent: float
    remaining: float
    progress: float


def build_backends(
    backend: Optional[str] = None,
    db_path: Optional[PathLike] = None,
    ledger_path: Optional[PathLike] = None,
    kv_path: Optional[PathLike] = None,
) -> Tuple[str, LedgerBackend, KeyValueStore]:
    """Instantiate the ledger backend and key-value store for ``backend``."""
    name = config.get_storage_backend(backend)
    if name == 'sqlite':
        path = Path(db_path or config.DB_PATH)
        return name, SqliteLedgerBackend(path), SqliteKeyValueStore(path)
    return (
        name,
        JsonLedgerBackend(Path(ledger_path or config.LEDGER_JSON_PATH)),
        JsonKeyValueStore(Path(kv_path or config.KV_JSON_PATH)),
    )


async def open_app(
    backend: Optional[str] = None,
    *,
    db_path: Optional[PathLike] = None,
    ledger_path: Optional[PathLike] = None,
    kv_path: Optional[PathLike] = None,
    clock: Optional[Clock] = None,
) -> AppContext:
    name, ledger_backend, kv = build_backends(backend, db_path, ledger_path, kv_path)
    await ledger_backend.open()
    try:
        await kv.open()
        store = LedgerStore(ledger_backend, clock=clock)
        await store.initialize()
    except BaseException:
        await ledger_backend.close()
        raise
    logger.info("CashHeal started with %s storage", name)
    return AppContext(
        backend_name=name,
        ledger_backend=ledger_backend,
        kv=kv,
        store=store,
        recorder=TransactionRecorder(store),
        plans=BudgetPlanStore(kv),
        settings=SettingsStore(kv),
    )


@asynccontextmanager
async def app_session(backend: Optional[str] = None, **kwargs: Any) -> AsyncIterator[AppContext]:
    ctx = await open_app(backend, **kwargs)
    try:
        yield ctx
    finally:
        await ctx.close()


async def submit_questionnaire(
    ctx: AppContext,
    monthly_income: Any,
    rent: Any,
    daily_spending: Any,
    strategy: Union[SavingsStrategy, str] = SavingsStrategy.BALANCED,
) -> SavedPlan:
    """Validate the answers, compute the plan and store it as the latest one."""
    answers = build_questionnaire_input(monthly_income, rent, daily_spending, strategy)
    plan = compute(answers)
    return await ctx.plans.save_plan(plan, timestamp=ctx.store.clock(), strategy=strategy)


async def period_overview(
    ctx: AppContext,
    period: Union[BudgetPeriod, str],
    now: Optional[int] = None,
) -> PeriodOverview:
    """Spent and remaining figures for one period.

    The questionnaire plan's budget takes precedence over the manual target
    when a plan has been saved.
    """
    period = BudgetPeriod(period)
    now = ctx.store.clock() if now is None else now
    target = await ctx.plans.get_budget_target(period)
    saved = await ctx.plans.load_plan()
    plan_budget = saved.plan.budget_for(period) if saved is not None else None
    budget = plan_budget if plan_budget is not None else target

    start = now - period.days * MS_PER_DAY
    transactions = await ctx.store.get_transactions(start=start, end=now)
    spent = period_spending(transactions, now=now)[period]
    return PeriodOverview(
        period=period,
        target=target,
        plan_budget=plan_budget,
        budget=budget,
        spent=spent,
        remaining=remaining_budget(budget, spent),
        progress=progress_ratio(budget, spent),
    )
