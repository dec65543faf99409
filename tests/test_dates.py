from datetime import date, datetime

import pytest

from expense_tracker.dates import (
    add_months,
    current_month_window,
    current_year_window,
    date_presets,
    end_of_month,
    end_of_year,
    friendly_month,
    month_key,
    parse_date,
    previous_month_window,
    start_of_month,
    start_of_year,
    sub_months,
)


def test_month_boundaries():
    assert start_of_month(date(2024, 2, 17)) == date(2024, 2, 1)
    assert end_of_month(date(2024, 2, 17)) == date(2024, 2, 29)
    assert end_of_month(date(2025, 2, 1)) == date(2025, 2, 28)
    assert end_of_month(date(2025, 12, 5)) == date(2025, 12, 31)


def test_year_boundaries():
    assert start_of_year(date(2025, 6, 30)) == date(2025, 1, 1)
    assert end_of_year(date(2025, 6, 30)) == date(2025, 12, 31)


def test_add_months_clamps_day():
    assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)
    assert sub_months(date(2025, 3, 31), 1) == date(2025, 2, 28)
    assert sub_months(date(2025, 1, 10), 1) == date(2024, 12, 10)
    assert sub_months(date(2025, 1, 10), 13) == date(2023, 12, 10)


def test_windows():
    today = date(2026, 3, 31)
    cur = current_month_window(today)
    prev = previous_month_window(today)
    year = current_year_window(today)
    assert (cur.start, cur.end) == (date(2026, 3, 1), date(2026, 3, 31))
    assert (prev.start, prev.end) == (date(2026, 2, 1), date(2026, 2, 28))
    assert (year.start, year.end) == (date(2026, 1, 1), date(2026, 12, 31))
    assert cur.contains(date(2026, 3, 1)) and cur.contains(date(2026, 3, 31))
    assert not cur.contains(date(2026, 4, 1))


def test_presets():
    presets = date_presets(date(2026, 1, 15))
    assert set(presets) == {"today", "this_month", "last_month", "this_year", "last_year"}
    assert presets["today"].start == presets["today"].end == date(2026, 1, 15)
    assert presets["last_month"].start == date(2025, 12, 1)
    assert presets["last_year"].end == date(2025, 12, 31)
    assert presets["this_year"].label == "This Year"


def test_month_key_and_label():
    assert month_key(date(2025, 7, 4)) == "2025-07"
    assert friendly_month("2026-02") == "February 2026"
    assert friendly_month("garbage") == "garbage"


def test_parse_date():
    assert parse_date("2025-01-31") == date(2025, 1, 31)
    assert parse_date("2025-01-31T23:10:00") == date(2025, 1, 31)
    assert parse_date(datetime(2025, 1, 31, 8)) == date(2025, 1, 31)
    assert parse_date(date(2025, 1, 31)) == date(2025, 1, 31)
    with pytest.raises(ValueError):
        parse_date("31/01/2025")
