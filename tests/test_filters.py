from datetime import datetime
from itertools import islice

from finfocus.domain import Expense, ExpenseCategory
from finfocus.filters import all_of, by_amount_range, by_category, by_date_range, by_month, matches_text
from finfocus.lazy import iter_expenses, lazy_top_categories


def make_sample():
    return (
        Expense("Groceries", 300.0, ExpenseCategory.FOOD, datetime(2025, 1, 1)),
        Expense("Bus pass", 200.0, ExpenseCategory.TRANSPORT, datetime(2025, 1, 2)),
        Expense("Restaurant", 700.0, ExpenseCategory.FOOD, datetime(2025, 1, 4), notes="Birthday dinner"),
        Expense("Taxi", 100.0, ExpenseCategory.TRANSPORT, datetime(2025, 2, 5)),
        Expense("Cinema", 50.0, ExpenseCategory.ENTERTAINMENT, datetime(2025, 2, 6)),
    )


def test_by_category_none_matches_everything():
    expenses = make_sample()

    assert len(list(filter(by_category(None), expenses))) == 5
    assert len(list(filter(by_category(ExpenseCategory.FOOD), expenses))) == 2


def test_by_date_range_is_inclusive():
    expenses = make_sample()
    pred = by_date_range(datetime(2025, 1, 2), datetime(2025, 1, 4))
    assert [e.title for e in expenses if pred(e)] == ["Bus pass", "Restaurant"]


def test_by_month_and_amount():
    expenses = make_sample()

    assert len([e for e in expenses if by_month(2, 2025)(e)]) == 2
    assert [e.title for e in expenses if by_amount_range(100, 250)(e)] == ["Bus pass", "Taxi"]


def test_matches_text_is_case_insensitive():
    expenses = make_sample()
    pred = matches_text("BIRTHDAY", "title", "notes")

    assert [e.title for e in expenses if pred(e)] == ["Restaurant"]
    assert all(matches_text("  ", "title")(e) for e in expenses)


def test_all_of_combines_predicates():
    expenses = make_sample()
    pred = all_of(by_category(ExpenseCategory.TRANSPORT), by_month(1, 2025))
    assert [e.title for e in expenses if pred(e)] == ["Bus pass"]


def test_iter_expenses_is_lazy_stop_early():
    expenses = make_sample()
    calls = {"n": 0}

    def pred(e: Expense) -> bool:
        calls["n"] += 1
        return e.category == ExpenseCategory.FOOD

    first = list(islice(iter_expenses(expenses, pred), 1))

    assert first[0].title == "Groceries"
    assert calls["n"] == 1


def test_lazy_top_categories_orders_by_total():
    top = list(lazy_top_categories(make_sample(), 2))

    assert top == [(ExpenseCategory.FOOD, 1000.0), (ExpenseCategory.TRANSPORT, 300.0)]
    assert list(lazy_top_categories(make_sample(), 0)) == []
