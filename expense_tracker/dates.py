import calendar
from datetime import date, datetime
from typing import Dict, Optional

from expense_tracker.domain import DateWindow

MONTH_KEY_FORMAT = "%Y-%m"


def start_of_month(d: date) -> date:
    return d.replace(day=1)


def end_of_month(d: date) -> date:
    last_day = calendar.monthrange(d.year, d.month)[1]
    return d.replace(day=last_day)


def start_of_year(d: date) -> date:
    return date(d.year, 1, 1)


def end_of_year(d: date) -> date:
    return date(d.year, 12, 31)


def add_months(d: date, n: int) -> date:
    """Add n months to d (n may be negative), clamping the day to the month end."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def sub_months(d: date, n: int) -> date:
    return add_months(d, -n)


def month_key(d: date) -> str:
    return d.strftime(MONTH_KEY_FORMAT)


def friendly_month(key: str) -> str:
    """Convert YYYY-MM to e.g. 'February 2026'."""
    try:
        return datetime.strptime(key, MONTH_KEY_FORMAT).strftime("%B %Y")
    except ValueError:
        return key


def parse_date(value) -> date:
    """Accept a date, a datetime or an ISO string ('2025-01-31' or '2025-01-31T10:00:00')."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if "T" in text:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return date.fromisoformat(text)


def parse_timestamp(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


# --- Windows

def current_month_window(today: date) -> DateWindow:
    return DateWindow(start_of_month(today), end_of_month(today), "This Month")


def previous_month_window(today: date) -> DateWindow:
    last = sub_months(today, 1)
    return DateWindow(start_of_month(last), end_of_month(last), "Last Month")


def current_year_window(today: date) -> DateWindow:
    return DateWindow(start_of_year(today), end_of_year(today), "This Year")


def previous_year_window(today: date) -> DateWindow:
    last = date(today.year - 1, 1, 1)
    return DateWindow(start_of_year(last), end_of_year(last), "Last Year")


def date_presets(today: date) -> Dict[str, DateWindow]:
    """Common ranges offered by filter widgets, keyed by a stable id."""
    return {
        "today": DateWindow(today, today, "Today"),
        "this_month": current_month_window(today),
        "last_month": previous_month_window(today),
        "this_year": current_year_window(today),
        "last_year": previous_year_window(today),
    }
