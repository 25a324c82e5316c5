from datetime import datetime
from typing import Callable, Optional

from finfocus.domain import Expense, ExpenseCategory


def by_category(category: Optional[ExpenseCategory]):
    """Match a category; ``None`` matches everything."""

    def _filter(record) -> bool:
        return category is None or record.category == category

    return _filter


def by_date_range(start: datetime, end: datetime, attr: str = "date"):
    def _filter(record) -> bool:
        return start <= getattr(record, attr) <= end

    return _filter


def by_amount_range(min: float, max: float):
    def _filter(e: Expense) -> bool:
        return min <= e.amount <= max

    return _filter


def by_month(month: int, year: int):
    def _filter(e: Expense) -> bool:
        return e.date.month == month and e.date.year == year

    return _filter


def matches_text(query: str, *fields: str) -> Callable[[object], bool]:
    """Case-insensitive substring match over the given attribute names.

    An empty query matches every record.
    """
    needle = query.strip().casefold()

    def _filter(record) -> bool:
        if not needle:
            return True
        return any(needle in (getattr(record, f) or "").casefold() for f in fields)

    return _filter


def all_of(*preds):
    def _filter(record) -> bool:
        return all(p(record) for p in preds)

    return _filter
