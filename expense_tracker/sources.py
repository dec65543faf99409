import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from expense_tracker.domain import Category, Expense, Income
from expense_tracker.events import (
    CATEGORIES_CHANGED,
    EXPENSES_CHANGED,
    INCOME_CHANGED,
    EventBus,
)
from expense_tracker.filters import ExpenseFilters, IncomeFilters, apply_filters
from expense_tracker.transforms import add_record, load_seed, remove_record

logger = logging.getLogger(__name__)


class DataSource(ABC):
    """Data-access collaborator the dashboard service fetches from."""

    @abstractmethod
    async def get_expenses(self, filters: Optional[ExpenseFilters] = None) -> Tuple[Expense, ...]:
        pass

    @abstractmethod
    async def get_income(self, filters: Optional[IncomeFilters] = None) -> Tuple[Income, ...]:
        pass

    @abstractmethod
    async def get_categories(self) -> Tuple[Category, ...]:
        pass


class SeedDataSource(DataSource):
    """In-memory source over immutable tuples, optionally seeded from JSON.

    Mutations swap the stored tuple for a new one and publish a change event
    on ``bus`` so listeners can recompute.
    """

    def __init__(
        self,
        categories: Tuple[Category, ...] = (),
        expenses: Tuple[Expense, ...] = (),
        income: Tuple[Income, ...] = (),
        bus: Optional[EventBus] = None,
    ):
        self._categories = tuple(categories)
        self._expenses = tuple(expenses)
        self._income = tuple(income)
        self.bus = bus or EventBus()

    @classmethod
    def from_seed(cls, path: str, bus: Optional[EventBus] = None) -> "SeedDataSource":
        categories, expenses, income = load_seed(path)
        return cls(categories, expenses, income, bus=bus)

    async def get_expenses(self, filters: Optional[ExpenseFilters] = None) -> Tuple[Expense, ...]:
        await asyncio.sleep(0)  # cooperate
        result = apply_filters(self._expenses, filters)
        logger.debug("get_expenses(%s) -> %d rows", filters, len(result))
        return result

    async def get_income(self, filters: Optional[IncomeFilters] = None) -> Tuple[Income, ...]:
        await asyncio.sleep(0)
        result = apply_filters(self._income, filters)
        logger.debug("get_income(%s) -> %d rows", filters, len(result))
        return result

    async def get_categories(self) -> Tuple[Category, ...]:
        await asyncio.sleep(0)
        return self._categories

    def add_expense(self, expense: Expense) -> None:
        self._expenses = add_record(self._expenses, expense)
        self.bus.publish(EXPENSES_CHANGED, {"id": expense.id, "action": "added"})

    def remove_expense(self, expense_id: str) -> None:
        self._expenses = remove_record(self._expenses, expense_id)
        self.bus.publish(EXPENSES_CHANGED, {"id": expense_id, "action": "removed"})

    def add_income(self, income: Income) -> None:
        self._income = add_record(self._income, income)
        self.bus.publish(INCOME_CHANGED, {"id": income.id, "action": "added"})

    def remove_income(self, income_id: str) -> None:
        self._income = remove_record(self._income, income_id)
        self.bus.publish(INCOME_CHANGED, {"id": income_id, "action": "removed"})

    def add_category(self, category: Category) -> None:
        self._categories = add_record(self._categories, category)
        self.bus.publish(CATEGORIES_CHANGED, {"id": category.id, "action": "added"})
