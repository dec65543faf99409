import json
import logging
from typing import Tuple

from expense_tracker.dates import parse_date, parse_timestamp
from expense_tracker.domain import INCOME_SOURCES, Category, Expense, Income

logger = logging.getLogger(__name__)


def _pick(data: dict, *keys, default=None):
    # seed files may use camelCase (API shape) or snake_case keys
    for k in keys:
        if k in data and data[k] is not None:
            return data[k]
    return default


def category_from_dict(data: dict) -> Category:
    return Category(
        id=str(data["id"]),
        name=data["name"],
        color=_pick(data, "color"),
        created_at=parse_timestamp(_pick(data, "createdAt", "created_at")),
        updated_at=parse_timestamp(_pick(data, "updatedAt", "updated_at")),
    )


def expense_from_dict(data: dict) -> Expense:
    return Expense(
        id=str(data["id"]),
        amount=float(data["amount"]),
        date=parse_date(data["date"]),
        category_id=str(_pick(data, "categoryId", "category_id")),
        description=_pick(data, "description", default=""),
        created_at=parse_timestamp(_pick(data, "createdAt", "created_at")),
        updated_at=parse_timestamp(_pick(data, "updatedAt", "updated_at")),
    )


def income_from_dict(data: dict) -> Income:
    source = str(data["source"]).lower()
    if source not in INCOME_SOURCES:
        raise ValueError(f"Unknown income source {data['source']!r} for income {data.get('id')}")
    return Income(
        id=str(data["id"]),
        amount=float(data["amount"]),
        date=parse_date(data["date"]),
        source=source,
        description=_pick(data, "description", default=""),
        created_at=parse_timestamp(_pick(data, "createdAt", "created_at")),
        updated_at=parse_timestamp(_pick(data, "updatedAt", "updated_at")),
    )


def load_seed(
    path: str,
) -> Tuple[
    Tuple[Category, ...],
    Tuple[Expense, ...],
    Tuple[Income, ...],
]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    categories = tuple(category_from_dict(c) for c in data.get("categories", []))
    expenses = tuple(expense_from_dict(e) for e in data.get("expenses", []))
    income = tuple(income_from_dict(i) for i in data.get("income", []))

    logger.info(
        "Loaded seed %s: %d categories, %d expenses, %d income",
        path, len(categories), len(expenses), len(income),
    )
    return categories, expenses, income


def add_record(records: tuple, record) -> tuple:
    return records + (record,)


def remove_record(records: tuple, record_id: str) -> tuple:
    return tuple(r for r in records if r.id != record_id)
