from datetime import date

import pytest

from expense_tracker.analytics import (
    average_monthly_expenses,
    average_monthly_income,
    balance,
    calculate_percentage,
    expenses_by_category,
    monthly_analytics,
    monthly_totals,
    recent,
    savings_rate,
    top_categories,
    total_expenses,
    total_income,
    yearly_analytics,
)
from expense_tracker.domain import Category, CategoryExpense, Expense, Income


def make_exp(id, amount, cat_id, d="2025-01-10"):
    return Expense(id=id, amount=amount, date=date.fromisoformat(d), category_id=cat_id)


def make_inc(id, amount, d="2025-01-10", source="salary"):
    return Income(id=id, amount=amount, date=date.fromisoformat(d), source=source)


CATS = (Category("food", "Food", "#f00"), Category("fun", "Fun"))


def scenario_a():
    return [
        make_exp("e1", 50, "food"),
        make_exp("e2", 30, "food"),
        make_exp("e3", 20, "fun"),
    ]


def test_totals():
    assert total_expenses(scenario_a()) == 100
    assert total_expenses([]) == 0
    assert total_income([make_inc("i1", 1000), make_inc("i2", 250.5)]) == 1250.5
    assert total_income([]) == 0


def test_balance_may_be_negative():
    assert balance(1000, 800) == 200
    assert balance(100, 300) == -200


def test_savings_rate():
    assert savings_rate(1000, 800) == 20
    assert savings_rate(0, 0) == 0
    assert savings_rate(0, 500) == 0
    assert savings_rate(100, 150) == -50


def test_calculate_percentage_zero_total():
    assert calculate_percentage(10, 0) == 0
    assert calculate_percentage(25, 200) == 12.5


def test_expenses_by_category_scenario():
    result = expenses_by_category(scenario_a(), CATS)
    assert [(ce.category_id, ce.amount, ce.percentage) for ce in result] == [
        ("food", 80, 80),
        ("fun", 20, 20),
    ]
    assert result[0].category_name == "Food"
    assert result[0].color == "#f00"
    assert result[1].color is None


def test_expenses_by_category_unknown_category():
    result = expenses_by_category([make_exp("e1", 10, "ghost")], CATS)
    assert len(result) == 1
    assert result[0].category_name == "Unknown"
    assert result[0].color is None
    assert result[0].percentage == 100


def test_expenses_by_category_first_category_match_wins():
    cats = (Category("food", "Food"), Category("food", "Groceries"))
    result = expenses_by_category([make_exp("e1", 10, "food")], cats)
    assert result[0].category_name == "Food"


def test_expenses_by_category_properties():
    expenses = [
        make_exp("e1", 12.3, "food"),
        make_exp("e2", 7.7, "fun"),
        make_exp("e3", 33.33, "rent"),
        make_exp("e4", 1.01, "fun"),
    ]
    cats = CATS + (Category("rent", "Rent"),)
    result = expenses_by_category(expenses, cats)

    assert sum(ce.percentage for ce in result) == pytest.approx(100, rel=1e-6)
    assert {ce.category_id for ce in result} == {"food", "fun", "rent"}
    assert sum(ce.amount for ce in result) == pytest.approx(total_expenses(expenses))
    for a, b in zip(result, result[1:]):
        assert a.amount >= b.amount


def test_expenses_by_category_empty():
    assert expenses_by_category([], CATS) == []


def test_expenses_by_category_ties_keep_first_appearance():
    expenses = [make_exp("e1", 10, "fun"), make_exp("e2", 10, "food")]
    result = expenses_by_category(expenses, CATS)
    assert [ce.category_id for ce in result] == ["fun", "food"]


def test_expenses_by_category_does_not_mutate_input():
    expenses = scenario_a()
    snapshot = list(expenses)
    expenses_by_category(expenses, CATS)
    assert expenses == snapshot


def test_top_categories_limits():
    ce = expenses_by_category(
        [make_exp("e1", 5, "a"), make_exp("e2", 15, "b"), make_exp("e3", 10, "c")], ()
    )
    assert top_categories(ce, limit=0) == []
    assert top_categories(ce, limit=-1) == []
    assert len(top_categories(ce, limit=100)) == 3
    assert [c.category_id for c in top_categories(ce, limit=2)] == ["b", "c"]


def test_top_categories_resorts_without_mutating():
    unsorted = [
        CategoryExpense("a", "A", 1, 10),
        CategoryExpense("b", "B", 5, 50),
        CategoryExpense("c", "C", 4, 40),
    ]
    before = list(unsorted)
    result = top_categories(unsorted)
    assert [c.category_id for c in result] == ["b", "c", "a"]
    assert unsorted == before
    assert result is not unsorted


def test_top_categories_default_limit_is_five():
    expenses = [make_exp(f"e{i}", i + 1, f"c{i}") for i in range(8)]
    result = top_categories(expenses_by_category(expenses, ()))
    assert len(result) == 5
    assert result[0].amount == 8


def test_average_monthly_uses_months_present():
    expenses = [
        make_exp("e1", 100, "food", "2025-01-05"),
        make_exp("e2", 50, "food", "2025-01-20"),
        make_exp("e3", 30, "food", "2025-03-02"),
    ]
    # January 150, March 30; February has no records and is not counted
    assert average_monthly_expenses(expenses) == 90
    assert average_monthly_expenses([]) == 0


def test_average_monthly_distinguishes_years():
    income = [
        make_inc("i1", 100, "2024-05-01"),
        make_inc("i2", 300, "2025-05-01"),
    ]
    assert average_monthly_income(income) == 200
    assert average_monthly_income([]) == 0


def test_monthly_totals_sorted():
    records = [make_inc("i1", 5, "2025-03-01"), make_inc("i2", 7, "2025-01-09"), make_inc("i3", 1, "2025-03-31")]
    assert monthly_totals(records) == {"2025-01": 7, "2025-03": 6}


def test_recent_newest_first_and_stable():
    records = [
        make_exp("e1", 1, "a", "2025-01-01"),
        make_exp("e2", 1, "a", "2025-01-03"),
        make_exp("e3", 1, "a", "2025-01-03"),
        make_exp("e4", 1, "a", "2025-01-02"),
    ]
    assert [r.id for r in recent(records, 3)] == ["e2", "e3", "e4"]
    assert recent(records, 0) == []
    assert [r.id for r in records] == ["e1", "e2", "e3", "e4"]


def test_aggregations_are_idempotent():
    expenses = scenario_a()
    assert expenses_by_category(expenses, CATS) == expenses_by_category(expenses, CATS)
    assert average_monthly_expenses(expenses) == average_monthly_expenses(expenses)


def test_monthly_analytics():
    expenses = [make_exp("e1", 40, "food", "2025-01-03"), make_exp("e2", 60, "fun", "2025-02-03")]
    income = [make_inc("i1", 500, "2025-02-28"), make_inc("i2", 200, "2025-04-01")]
    months = monthly_analytics(expenses, income, CATS)

    assert [m.month for m in months] == ["2025-01", "2025-02", "2025-04"]
    jan, feb, apr = months
    assert jan.balance == -40
    assert feb.total_income == 500 and feb.total_expenses == 60
    assert feb.expenses_by_category[0].category_name == "Fun"
    assert apr.expenses_by_category == ()


def test_yearly_analytics_filters_year():
    expenses = [make_exp("e1", 40, "food", "2024-12-31"), make_exp("e2", 60, "fun", "2025-02-03")]
    income = [make_inc("i1", 500, "2025-02-28")]
    report = yearly_analytics(2025, expenses, income, CATS)

    assert report.year == 2025
    assert report.total_expenses == 60
    assert report.total_income == 500
    assert report.total_balance == 440
    assert [m.month for m in report.months] == ["2025-02"]


def test_expenses_by_category_blank_name_is_unknown():
    cats = (Category("food", "", "#0f0"),)
    result = expenses_by_category([make_exp("e1", 10, "food")], cats)
    assert result[0].category_name == "Unknown"
    assert result[0].color == "#0f0"
