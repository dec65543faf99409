import asyncio
import logging
from datetime import date
from typing import Awaitable, Dict, Optional

from expense_tracker.analytics import yearly_analytics
from expense_tracker.dashboard import (
    RECENT_ACTIVITY_LIMIT,
    TOP_CATEGORIES_LIMIT,
    DashboardInputs,
    FetchError,
    compose_dashboard,
    dashboard_windows,
)
from expense_tracker.domain import DashboardData, DateWindow, YearlyAnalytics
from expense_tracker.events import DATA_CHANGED, Event, EventBus
from expense_tracker.filters import ExpenseFilters, IncomeFilters
from expense_tracker.functional import Either, Left, Right
from expense_tracker.sources import DataSource

logger = logging.getLogger(__name__)


class DashboardService:
    """Runs the dashboard queries concurrently and composes their outcomes.

    Each query outcome is recorded as it completes, so ``snapshot()`` can be
    called at any time: it reports the loading placeholder until every query
    of the current round has finished. Change events on ``bus`` mark the
    cached dashboard stale; the next ``dashboard()`` call refetches.
    """

    def __init__(
        self,
        source: DataSource,
        bus: Optional[EventBus] = None,
        top_limit: int = TOP_CATEGORIES_LIMIT,
        recent_limit: int = RECENT_ACTIVITY_LIMIT,
    ):
        self.source = source
        self.top_limit = top_limit
        self.recent_limit = recent_limit
        self._outcomes: Dict[str, Either] = {}
        self._round = 0
        self._stale = True
        self._today: Optional[date] = None

        bus = bus if bus is not None else getattr(source, "bus", None)
        if bus is not None:
            for name in DATA_CHANGED:
                bus.subscribe(name, self._on_data_changed)

    @property
    def is_stale(self) -> bool:
        return self._stale

    def _on_data_changed(self, event: Event) -> None:
        logger.info("%s %s, dashboard marked stale", event.name, event.payload)
        self._stale = True

    def _queries(self, today: date) -> Dict[str, Awaitable]:
        w = dashboard_windows(today)
        return {
            "current_expenses": self.source.get_expenses(ExpenseFilters.for_window(w.current_month)),
            "current_income": self.source.get_income(IncomeFilters.for_window(w.current_month)),
            "previous_expenses": self.source.get_expenses(ExpenseFilters.for_window(w.previous_month)),
            "previous_income": self.source.get_income(IncomeFilters.for_window(w.previous_month)),
            "year_expenses": self.source.get_expenses(ExpenseFilters.for_window(w.current_year)),
            "year_income": self.source.get_income(IncomeFilters.for_window(w.current_year)),
            "categories": self.source.get_categories(),
        }

    async def _run_query(self, round_id: int, name: str, query: Awaitable, outcomes: Dict[str, Either]) -> None:
        try:
            outcome: Either = Right(await query)
        except Exception as exc:
            logger.error("Dashboard query %s failed: %s", name, exc, exc_info=True)
            error = FetchError(name, str(exc))
            error.__cause__ = exc
            outcome = Left(error)
        outcomes[name] = outcome
        # a superseded round no longer feeds snapshot()
        if round_id == self._round:
            self._outcomes[name] = outcome

    async def refresh(self, today: date) -> DashboardData:
        self._round += 1
        round_id = self._round
        self._outcomes = {}
        self._stale = False
        self._today = today

        outcomes: Dict[str, Either] = {}
        queries = self._queries(today)
        logger.debug("Dashboard round %d: %d queries for %s", round_id, len(queries), today)
        await asyncio.gather(*(self._run_query(round_id, n, q, outcomes) for n, q in queries.items()))
        return self._compose(outcomes)

    def _compose(self, outcomes: Dict[str, Either]) -> DashboardData:
        return compose_dashboard(
            DashboardInputs(**outcomes),
            top_limit=self.top_limit,
            recent_limit=self.recent_limit,
        )

    def snapshot(self) -> DashboardData:
        return self._compose(self._outcomes)

    async def dashboard(self, today: date) -> DashboardData:
        if self._stale or self._today != today:
            return await self.refresh(today)
        return self.snapshot()


class ReportService:
    """Yearly analytics over a data source."""

    def __init__(self, source: DataSource):
        self.source = source

    async def yearly_report(self, year: int) -> YearlyAnalytics:
        window = DateWindow(date(year, 1, 1), date(year, 12, 31))
        expenses, income, categories = await asyncio.gather(
            self.source.get_expenses(ExpenseFilters.for_window(window)),
            self.source.get_income(IncomeFilters.for_window(window)),
            self.source.get_categories(),
        )
        logger.debug("Yearly report %d: %d expenses, %d income", year, len(expenses), len(income))
        return yearly_analytics(year, expenses, income, categories)

