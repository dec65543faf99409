from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

INCOME_SOURCES = (
    "salary",
    "freelance",
    "business",
    "investment",
    "rental",
    "gift",
    "bonus",
    "refund",
    "other",
)

UNKNOWN_CATEGORY = "Unknown"


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    color: Optional[str] = None    # hex, e.g. "#4caf50"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Expense:
    id: str
    amount: float      # non-negative
    date: date
    category_id: str
    description: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Income:
    id: str
    amount: float      # non-negative
    date: date
    source: str        # one of INCOME_SOURCES
    description: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class DateWindow:
    start: date
    end: date          # inclusive
    label: str = ""

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end


# --- Derived aggregates

@dataclass(frozen=True)
class CategoryExpense:
    category_id: str
    category_name: str
    amount: float
    percentage: float
    color: Optional[str] = None


@dataclass(frozen=True)
class TrendPoint:
    label: str
    income: float
    expenses: float
    balance: float
    estimated: bool = False  # True when scaled from another period, not fetched


@dataclass(frozen=True)
class MonthlyAnalytics:
    month: str         # YYYY-MM
    total_expenses: float
    total_income: float
    balance: float
    expenses_by_category: tuple[CategoryExpense, ...] = ()


@dataclass(frozen=True)
class YearlyAnalytics:
    year: int
    months: tuple[MonthlyAnalytics, ...]
    total_expenses: float
    total_income: float
    total_balance: float


# --- Dashboard view-model

@dataclass(frozen=True)
class DashboardStats:
    total_income: float = 0
    total_expenses: float = 0
    balance: float = 0
    savings_rate: float = 0
    categories_count: int = 0
    expense_count: int = 0
    income_count: int = 0
    average_monthly_expenses: float = 0
    average_monthly_income: float = 0


@dataclass(frozen=True)
class DashboardChartData:
    expenses_by_category: tuple[CategoryExpense, ...] = ()
    top_categories: tuple[CategoryExpense, ...] = ()
    monthly_trend: tuple[TrendPoint, ...] = ()


@dataclass(frozen=True)
class RecentActivity:
    recent_expenses: tuple[Expense, ...] = ()
    recent_income: tuple[Income, ...] = ()


@dataclass(frozen=True)
class DashboardData:
    stats: DashboardStats = field(default_factory=DashboardStats)
    charts: DashboardChartData = field(default_factory=DashboardChartData)
    activity: RecentActivity = field(default_factory=RecentActivity)
    is_loading: bool = False
    error: Optional[Exception] = None
