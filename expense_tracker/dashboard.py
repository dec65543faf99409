"""Dashboard composition.

The dashboard is built from seven query outcomes: expenses and income for the
current month, the previous month and the current year, plus the category
list. ``compose_dashboard`` is a pure function of those outcomes; it returns
the all-zero placeholder until every outcome is a success and never exposes a
partially computed result.
"""
from dataclasses import dataclass, fields
from datetime import date
from typing import Optional, Sequence

from expense_tracker import analytics
from expense_tracker.dates import (
    current_month_window,
    current_year_window,
    previous_month_window,
)
from expense_tracker.domain import (
    Category,
    DashboardChartData,
    DashboardData,
    DashboardStats,
    DateWindow,
    Expense,
    Income,
    RecentActivity,
    TrendPoint,
)
from expense_tracker.functional import Either

# "2 months ago" is scaled from last month instead of being fetched
ESTIMATE_INCOME_FACTOR = 0.9
ESTIMATE_EXPENSES_FACTOR = 0.95

TOP_CATEGORIES_LIMIT = 5
RECENT_ACTIVITY_LIMIT = 5


class FetchError(Exception):
    """A dashboard query failed upstream."""

    def __init__(self, query: str, message: str = ""):
        self.query = query
        super().__init__(f"{query}: {message}" if message else query)


@dataclass(frozen=True)
class DashboardWindows:
    current_month: DateWindow
    previous_month: DateWindow
    current_year: DateWindow


def dashboard_windows(today: date) -> DashboardWindows:
    return DashboardWindows(
        current_month=current_month_window(today),
        previous_month=previous_month_window(today),
        current_year=current_year_window(today),
    )


@dataclass(frozen=True)
class DashboardInputs:
    """Outcome of each query; ``None`` while the query is still in flight."""

    current_expenses: Optional[Either] = None
    current_income: Optional[Either] = None
    previous_expenses: Optional[Either] = None
    previous_income: Optional[Either] = None
    year_expenses: Optional[Either] = None
    year_income: Optional[Either] = None
    categories: Optional[Either] = None

    def outcomes(self) -> list[tuple[str, Optional[Either]]]:
        return [(f.name, getattr(self, f.name)) for f in fields(self)]

    def first_error(self) -> Optional[Exception]:
        for _, outcome in self.outcomes():
            if outcome is not None and outcome.is_left():
                return outcome.get_error()
        return None

    def is_pending(self) -> bool:
        return any(outcome is None for _, outcome in self.outcomes())


QUERY_NAMES = tuple(f.name for f in fields(DashboardInputs))


def placeholder(is_loading: bool, error: Optional[Exception] = None) -> DashboardData:
    return DashboardData(
        stats=DashboardStats(),
        charts=DashboardChartData(),
        activity=RecentActivity(),
        is_loading=is_loading,
        error=error,
    )


def monthly_trend(
    current_income: float,
    current_expenses: float,
    previous_income: float,
    previous_expenses: float,
) -> tuple[TrendPoint, ...]:
    estimated_income = previous_income * ESTIMATE_INCOME_FACTOR
    estimated_expenses = previous_expenses * ESTIMATE_EXPENSES_FACTOR
    return (
        TrendPoint(
            label="2 months ago",
            income=estimated_income,
            expenses=estimated_expenses,
            balance=analytics.balance(estimated_income, estimated_expenses),
            estimated=True,
        ),
        TrendPoint(
            label="Last month",
            income=previous_income,
            expenses=previous_expenses,
            balance=analytics.balance(previous_income, previous_expenses),
        ),
        TrendPoint(
            label="This month",
            income=current_income,
            expenses=current_expenses,
            balance=analytics.balance(current_income, current_expenses),
        ),
    )


def build_dashboard(
    current_expenses: Sequence[Expense],
    current_income: Sequence[Income],
    previous_expenses: Sequence[Expense],
    previous_income: Sequence[Income],
    year_expenses: Sequence[Expense],
    year_income: Sequence[Income],
    categories: Sequence[Category],
    top_limit: int = TOP_CATEGORIES_LIMIT,
    recent_limit: int = RECENT_ACTIVITY_LIMIT,
) -> DashboardData:
    income_total = analytics.total_income(current_income)
    expenses_total = analytics.total_expenses(current_expenses)

    by_category = analytics.expenses_by_category(current_expenses, categories)

    stats = DashboardStats(
        total_income=income_total,
        total_expenses=expenses_total,
        balance=analytics.balance(income_total, expenses_total),
        savings_rate=analytics.savings_rate(income_total, expenses_total),
        categories_count=len(categories),
        expense_count=len(current_expenses),
        income_count=len(current_income),
        average_monthly_expenses=analytics.average_monthly_expenses(year_expenses),
        average_monthly_income=analytics.average_monthly_income(year_income),
    )
    charts = DashboardChartData(
        expenses_by_category=tuple(by_category),
        top_categories=tuple(analytics.top_categories(by_category, top_limit)),
        monthly_trend=monthly_trend(
            income_total,
            expenses_total,
            analytics.total_income(previous_income),
            analytics.total_expenses(previous_expenses),
        ),
    )
    activity = RecentActivity(
        recent_expenses=tuple(analytics.recent(current_expenses, recent_limit)),
        recent_income=tuple(analytics.recent(current_income, recent_limit)),
    )
    return DashboardData(stats=stats, charts=charts, activity=activity)


def compose_dashboard(
    inputs: DashboardInputs,
    top_limit: int = TOP_CATEGORIES_LIMIT,
    recent_limit: int = RECENT_ACTIVITY_LIMIT,
) -> DashboardData:
    """Gate on every query outcome, then build the dashboard.

    A failed query wins over pending ones: the placeholder is returned with
    ``error`` set to the first failure in query order. Otherwise any pending
    query yields the loading placeholder.
    """
    error = inputs.first_error()
    if error is not None:
        return placeholder(is_loading=False, error=error)
    if inputs.is_pending():
        return placeholder(is_loading=True)

    data = {name: outcome.get_or_else(()) for name, outcome in inputs.outcomes()}
    return build_dashboard(**data, top_limit=top_limit, recent_limit=recent_limit)
