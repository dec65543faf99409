"""Aggregation functions turning expense/income collections into dashboard metrics.

Every function here is pure: inputs are read, never mutated, and each call
returns a newly built result. Amounts are assumed non-negative and validated
upstream; nothing here raises for empty or well-typed input.
"""
from collections import defaultdict
from functools import reduce
from typing import Iterable, Sequence, TypeVar, Union

from expense_tracker.dates import month_key
from expense_tracker.domain import (
    UNKNOWN_CATEGORY,
    Category,
    CategoryExpense,
    Expense,
    Income,
    MonthlyAnalytics,
    YearlyAnalytics,
)
from expense_tracker.functional import category_index, safe_category

Record = Union[Expense, Income]
R = TypeVar("R", Expense, Income)


def _sum_amounts(records: Iterable[Record]) -> float:
    return reduce(lambda acc, r: acc + r.amount, records, 0)


def total_expenses(expenses: Iterable[Expense]) -> float:
    return _sum_amounts(expenses)


def total_income(income: Iterable[Income]) -> float:
    return _sum_amounts(income)


def balance(total_income: float, total_expenses: float) -> float:
    return total_income - total_expenses


def calculate_percentage(value: float, total: float) -> float:
    if total == 0:
        return 0
    return value / total * 100


def savings_rate(total_income: float, total_expenses: float) -> float:
    """Share of income not spent, in percent. Zero when there is no income."""
    if total_income == 0:
        return 0
    return calculate_percentage(total_income - total_expenses, total_income)


def expenses_by_category(
    expenses: Iterable[Expense], categories: Iterable[Category]
) -> list[CategoryExpense]:
    """Group expenses per category, largest amount first.

    Percentages are relative to the total of ``expenses`` itself. Categories
    missing from ``categories`` resolve to "Unknown" with no color. Equal
    amounts keep the order in which their category first appears in the input.
    """
    index = category_index(categories)
    totals: dict[str, float] = {}
    for e in expenses:
        totals[e.category_id] = totals.get(e.category_id, 0) + e.amount

    grand_total = sum(totals.values())
    result = []
    for cat_id, amount in totals.items():
        cat = safe_category(index, cat_id)
        result.append(
            CategoryExpense(
                category_id=cat_id,
                category_name=cat.map(lambda c: c.name or UNKNOWN_CATEGORY).get_or_else(UNKNOWN_CATEGORY),
                amount=amount,
                percentage=calculate_percentage(amount, grand_total),
                color=cat.map(lambda c: c.color).get_or_else(None),
            )
        )
    return sorted(result, key=lambda ce: ce.amount, reverse=True)


def top_categories(
    category_expenses: Iterable[CategoryExpense], limit: int = 5
) -> list[CategoryExpense]:
    if limit <= 0:
        return []
    ordered = sorted(category_expenses, key=lambda ce: ce.amount, reverse=True)
    return ordered[:limit]


def monthly_totals(records: Iterable[Record]) -> dict[str, float]:
    """Sum per YYYY-MM month, in ascending month order. Empty months are absent."""
    totals: dict[str, float] = defaultdict(float)
    for r in records:
        totals[month_key(r.date)] += r.amount
    return {m: totals[m] for m in sorted(totals)}


def _average_monthly(records: Iterable[Record]) -> float:
    totals = monthly_totals(records)
    if not totals:
        return 0
    return sum(totals.values()) / len(totals)


def average_monthly_expenses(expenses: Iterable[Expense]) -> float:
    return _average_monthly(expenses)


def average_monthly_income(income: Iterable[Income]) -> float:
    return _average_monthly(income)


def recent(records: Iterable[R], limit: int = 5) -> list[R]:
    """Newest records first; records sharing a date keep their input order."""
    if limit <= 0:
        return []
    return sorted(records, key=lambda r: r.date, reverse=True)[:limit]


def monthly_analytics(
    expenses: Sequence[Expense],
    income: Sequence[Income],
    categories: Sequence[Category],
) -> list[MonthlyAnalytics]:
    exp_by_month: dict[str, list[Expense]] = defaultdict(list)
    inc_by_month: dict[str, list[Income]] = defaultdict(list)
    for e in expenses:
        exp_by_month[month_key(e.date)].append(e)
    for i in income:
        inc_by_month[month_key(i.date)].append(i)

    result = []
    for m in sorted(set(exp_by_month) | set(inc_by_month)):
        spent = total_expenses(exp_by_month.get(m, ()))
        earned = total_income(inc_by_month.get(m, ()))
        result.append(
            MonthlyAnalytics(
                month=m,
                total_expenses=spent,
                total_income=earned,
                balance=balance(earned, spent),
                expenses_by_category=tuple(
                    expenses_by_category(exp_by_month.get(m, ()), categories)
                ),
            )
        )
    return result


def yearly_analytics(
    year: int,
    expenses: Sequence[Expense],
    income: Sequence[Income],
    categories: Sequence[Category],
) -> YearlyAnalytics:
    year_expenses = [e for e in expenses if e.date.year == year]
    year_income = [i for i in income if i.date.year == year]
    spent = total_expenses(year_expenses)
    earned = total_income(year_income)
    return YearlyAnalytics(
        year=year,
        months=tuple(monthly_analytics(year_expenses, year_income, categories)),
        total_expenses=spent,
        total_income=earned,
        total_balance=balance(earned, spent),
    )
