from datetime import datetime

import pytest

from finfocus.codec import (
    decode_many,
    expense_from_dict,
    expense_to_dict,
    portfolio_from_dict,
    portfolio_to_dict,
)
from finfocus.domain import Expense, ExpenseCategory, InvestmentType, RecurringFrequency
from finfocus.errors import StorageError
from finfocus.samples import sample_portfolio
from finfocus.storage import JsonStore, format_size


def test_write_then_read(tmp_path):
    store = JsonStore(tmp_path / "nested" / "data.json")
    store.write({"items": [1, 2, 3]})

    assert store.exists()
    assert store.read() == {"items": [1, 2, 3]}
    assert store.size() > 0


def test_missing_file_reads_none(tmp_path):
    store = JsonStore(tmp_path / "missing.json")

    assert store.read() is None
    assert store.size() == 0
    store.delete()


def test_corrupt_file_raises_storage_error(tmp_path):
    path = tmp_path / "expenses.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageError) as exc:
        JsonStore(path).read()
    assert exc.value.path == path


def test_unserializable_write_raises_and_leaves_no_temp_file(tmp_path):
    store = JsonStore(tmp_path / "data.json")

    with pytest.raises(StorageError):
        store.write({"when": datetime(2025, 1, 1)})
    assert list(tmp_path.iterdir()) == []


def test_format_size():
    assert format_size(0) == "0 bytes"
    assert format_size(1) == "1 byte"
    assert format_size(1234) == "1.2 KB"
    assert format_size(1_500_000) == "1.5 MB"


def test_expense_dict_uses_camel_case_keys():
    e = Expense("Netflix", 15.99, ExpenseCategory.ENTERTAINMENT, datetime(2025, 3, 1, 9, 30),
                is_recurring=True, recurring_frequency=RecurringFrequency.MONTHLY)

    d = expense_to_dict(e)

    assert d["isRecurring"] is True
    assert d["recurringFrequency"] == "Monthly"
    assert d["category"] == "Entertainment"
    assert d["date"] == "2025-03-01T09:30:00"
    assert expense_from_dict(d) == e


def test_expense_from_dict_defaults_optional_fields():
    e = expense_from_dict({
        "id": "e1", "title": "Bus", "amount": 2, "category": "Transportation", "date": "2025-03-01T08:00:00",
    })

    assert e.amount == 2.0
    assert e.notes == ""
    assert e.recurring_frequency is None


def test_portfolio_dict_keys_target_allocation_by_value():
    p = sample_portfolio(datetime(2025, 5, 15))
    d = portfolio_to_dict(p)

    assert d["targetAllocation"]["Stocks"] == 60.0
    assert len(d["investments"]) == 6
    restored = portfolio_from_dict(d)
    assert restored.target_allocation[InvestmentType.STOCKS] == 60.0
    assert restored.total_value == pytest.approx(p.total_value)


def test_decode_many_of_none_is_empty():
    assert decode_many(None, expense_from_dict) == ()
