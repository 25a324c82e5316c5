from collections import defaultdict
from typing import Callable, Iterable, Iterator, Tuple

from finfocus.domain import Expense, ExpenseCategory


def iter_expenses(
    expenses: Iterable[Expense], pred: Callable[[Expense], bool]
) -> Iterable[Expense]:
    for e in expenses:
        if pred(e):
            yield e


def lazy_top_categories(
    expenses: Iterable[Expense], k: int
) -> Iterator[Tuple[ExpenseCategory, float]]:
    totals_by_category: dict[ExpenseCategory, float] = defaultdict(float)

    for e in expenses:
        totals_by_category[e.category] += e.amount

    ordered: list[Tuple[ExpenseCategory, float]] = sorted(
        totals_by_category.items(),
        key=lambda item: item[1],
        reverse=True,
    )

    for category, total in ordered[: max(0, k)]:
        yield category, total
