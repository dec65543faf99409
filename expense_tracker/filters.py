from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Optional, TypeVar, Union

from expense_tracker.domain import DateWindow, Expense, Income

R = TypeVar("R", Expense, Income)
Predicate = Callable[[Union[Expense, Income]], bool]


def by_category(cat_id: str):
    def _filter(e: Expense) -> bool:
        return e.category_id == cat_id

    return _filter


def by_source(source: str):
    def _filter(i: Income) -> bool:
        return i.source == source

    return _filter


def by_date_range(start: Optional[date], end: Optional[date]):
    """Inclusive on both ends; a missing bound is open."""
    def _filter(r) -> bool:
        if start is not None and r.date < start:
            return False
        if end is not None and r.date > end:
            return False
        return True

    return _filter


def by_amount_range(min: Optional[float], max: Optional[float]):
    def _filter(r) -> bool:
        if min is not None and r.amount < min:
            return False
        if max is not None and r.amount > max:
            return False
        return True

    return _filter


def by_description(text: str):
    needle = text.casefold()

    def _filter(r) -> bool:
        return needle in (r.description or "").casefold()

    return _filter


@dataclass(frozen=True)
class ExpenseFilters:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category_id: Optional[str] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    description: Optional[str] = None

    @classmethod
    def for_window(cls, window: DateWindow) -> "ExpenseFilters":
        return cls(start_date=window.start, end_date=window.end)

    def predicates(self) -> list[Predicate]:
        preds = _common_predicates(self)
        if self.category_id:
            preds.append(by_category(self.category_id))
        return preds


@dataclass(frozen=True)
class IncomeFilters:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    source: Optional[str] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    description: Optional[str] = None

    @classmethod
    def for_window(cls, window: DateWindow) -> "IncomeFilters":
        return cls(start_date=window.start, end_date=window.end)

    def predicates(self) -> list[Predicate]:
        preds = _common_predicates(self)
        if self.source:
            preds.append(by_source(self.source))
        return preds


def _common_predicates(f) -> list[Predicate]:
    preds: list[Predicate] = []
    if f.start_date is not None or f.end_date is not None:
        preds.append(by_date_range(f.start_date, f.end_date))
    if f.min_amount is not None or f.max_amount is not None:
        preds.append(by_amount_range(f.min_amount, f.max_amount))
    if f.description:
        preds.append(by_description(f.description))
    return preds


def apply_filters(
    records: Iterable[R], filters: Union[ExpenseFilters, IncomeFilters, None]
) -> tuple[R, ...]:
    if filters is None:
        return tuple(records)
    preds = filters.predicates()
    return tuple(r for r in records if all(p(r) for p in preds))
