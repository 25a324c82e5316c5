from dataclasses import replace
from datetime import datetime
from functools import reduce
from typing import Iterable, Tuple, TypeVar

from finfocus.domain import Budget, Expense, Holding, NewsArticle

R = TypeVar("R")


def add_record(records: Tuple[R, ...], record: R) -> Tuple[R, ...]:
    return records + (record,)


def replace_by_id(records: Tuple[R, ...], record: R) -> Tuple[R, ...]:
    return tuple(record if r.id == record.id else r for r in records)


def remove_by_id(records: Tuple[R, ...], record_id: str) -> Tuple[R, ...]:
    return tuple(filter(lambda r: r.id != record_id, records))


def in_bucket(expense: Expense, budget: Budget) -> bool:
    return (
        expense.category == budget.category
        and expense.date.month == budget.month
        and expense.date.year == budget.year
    )


def bucket_spent(budget: Budget, expenses: Iterable[Expense]) -> float:
    return reduce(lambda acc, e: acc + e.amount if in_bucket(e, budget) else acc, expenses, 0.0)


def recompute_budgets(
    budgets: Tuple[Budget, ...], expenses: Tuple[Expense, ...]
) -> Tuple[Budget, ...]:
    return tuple(replace(b, spent_amount=bucket_spent(b, expenses)) for b in budgets)


def apply_expense_to_budget(budgets: Tuple[Budget, ...], expense: Expense) -> Tuple[Budget, ...]:
    # only the first matching bucket is charged
    for b in budgets:
        if in_bucket(expense, b):
            return replace_by_id(budgets, replace(b, spent_amount=b.spent_amount + expense.amount))
    return budgets


def reprice_holdings(
    holdings: Tuple[Holding, ...], changes: Iterable[float], floor: float = 0.01
) -> Tuple[Holding, ...]:
    return tuple(
        replace(h, current_price=max(h.current_price * (1 + float(change)), floor))
        for h, change in zip(holdings, changes)
    )


def set_bookmark(
    articles: Tuple[NewsArticle, ...], article_id: str, value: bool
) -> Tuple[NewsArticle, ...]:
    return tuple(replace(a, is_bookmarked=value) if a.id == article_id else a for a in articles)


def toggle_bookmark(articles: Tuple[NewsArticle, ...], article_id: str) -> Tuple[NewsArticle, ...]:
    return tuple(
        replace(a, is_bookmarked=not a.is_bookmarked) if a.id == article_id else a
        for a in articles
    )


def prune_expenses(expenses: Tuple[Expense, ...], cutoff: datetime) -> Tuple[Expense, ...]:
    return tuple(filter(lambda e: e.date >= cutoff, expenses))


def prune_news(articles: Tuple[NewsArticle, ...], cutoff: datetime) -> Tuple[NewsArticle, ...]:
    # bookmarked articles survive regardless of age
    return tuple(a for a in articles if a.published_date >= cutoff or a.is_bookmarked)


def expense_amounts(expenses: Tuple[Expense, ...]) -> Tuple[float, ...]:
    return tuple(map(lambda e: e.amount, expenses))
