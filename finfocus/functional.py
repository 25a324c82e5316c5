from abc import ABC, abstractmethod
from typing import Callable, Generic, Iterable, Optional, TypeVar

from finfocus.domain import Budget, Expense, Holding
from finfocus.transforms import bucket_spent

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    def is_some(self) -> bool:
        return isinstance(self, Some)

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f):
        return Some(f(self._value))

    def bind(self, f):
        return f(self._value)

    def get_or_else(self, default):
        return self._value

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f):
        return self

    def bind(self, f):
        return self

    def get_or_else(self, default):
        return default

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_right(self) -> bool:
        return isinstance(self, Right)

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f):
        return Right(f(self._value))

    def bind(self, f):
        return f(self._value)

    def get_or_else(self, default):
        return self._value

    def get_error(self):
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f):
        return self

    def bind(self, f):
        return self

    def get_or_else(self, default):
        return default

    def get_error(self):
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def find_by_id(records: Iterable[T], record_id: Optional[str]) -> Maybe[T]:
    for r in records:
        if r.id == record_id:
            return Some(r)
    return Nothing()


def validate_expense(e: Expense) -> Either[dict, Expense]:
    if not e.title.strip():
        return Left({
            "error": "empty_title",
            "message": "Expense title must not be empty",
        })
    if e.amount <= 0:
        return Left({
            "error": "invalid_amount",
            "message": f"Expense amount must be positive, got {e.amount}",
            "amount": e.amount,
        })
    if e.is_recurring and e.recurring_frequency is None:
        return Left({
            "error": "missing_frequency",
            "message": f"Recurring expense {e.title} has no frequency",
        })
    return Right(e)


def validate_budget(b: Budget) -> Either[dict, Budget]:
    if b.budget_amount <= 0:
        return Left({
            "error": "invalid_amount",
            "message": f"Budget amount must be positive, got {b.budget_amount}",
            "amount": b.budget_amount,
        })
    if not 1 <= b.month <= 12:
        return Left({
            "error": "invalid_month",
            "message": f"Month must be between 1 and 12, got {b.month}",
            "month": b.month,
        })
    return Right(b)


def validate_holding(h: Holding) -> Either[dict, Holding]:
    if not h.symbol.strip():
        return Left({
            "error": "empty_symbol",
            "message": "Holding symbol must not be empty",
        })
    if h.shares <= 0:
        return Left({
            "error": "invalid_shares",
            "message": f"Share count for {h.symbol} must be positive",
            "shares": h.shares,
        })
    if h.purchase_price < 0 or h.current_price < 0:
        return Left({
            "error": "invalid_price",
            "message": f"Prices for {h.symbol} must not be negative",
        })
    return Right(h)


def check_budget(b: Budget, expenses: Iterable[Expense]) -> Either[dict, Budget]:
    spent = bucket_spent(b, expenses)

    if spent > b.budget_amount:
        return Left({
            "error": "budget_exceeded",
            "message": f"Budget limit exceeded for {b.category.value} {b.month:02d}/{b.year}",
            "category": b.category.value,
            "limit": b.budget_amount,
            "spent": spent,
            "over_budget": spent - b.budget_amount,
        })

    return Right(b)
