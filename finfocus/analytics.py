"""Aggregations behind the expense and investment screens.

Everything here is a pure function of the records passed in. Ratios guard
their denominators and report zero instead of raising.
"""

import calendar
import string
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from finfocus.domain import (
    Budget,
    Expense,
    ExpenseCategory,
    InvestmentType,
    NewsArticle,
    Portfolio,
    RiskLevel,
)
from finfocus.filters import by_category, by_date_range, by_month
from finfocus.lazy import iter_expenses
from finfocus.transforms import expense_amounts

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "as", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could", "should",
})


@dataclass(frozen=True)
class ExpensesSummary:
    total_amount: float
    expense_count: int
    category_breakdown: Dict[ExpenseCategory, float]
    top_category: Optional[ExpenseCategory]
    start: datetime
    end: datetime

    @property
    def average_amount(self) -> float:
        if self.expense_count == 0:
            return 0.0
        return self.total_amount / self.expense_count


@dataclass(frozen=True)
class CategoryBudgetPerformance:
    budget_amount: float
    actual_spent: float
    is_over_budget: bool
    percentage_used: float   # percent, not clamped

    @property
    def remaining_amount(self) -> float:
        return self.budget_amount - self.actual_spent


@dataclass(frozen=True)
class BudgetPerformance:
    month: int
    year: int
    total_budget: float
    total_spent: float
    category_performance: Dict[ExpenseCategory, CategoryBudgetPerformance]
    over_budget_categories: int

    @property
    def remaining_budget(self) -> float:
        return self.total_budget - self.total_spent

    @property
    def budget_utilization(self) -> float:
        if self.total_budget <= 0:
            return 0.0
        return self.total_spent / self.total_budget * 100

    @property
    def is_over_budget(self) -> bool:
        return self.total_spent > self.total_budget


@dataclass(frozen=True)
class PortfolioMetrics:
    total_value: float
    total_gain_loss: float
    total_gain_loss_percentage: float
    diversification_score: float
    risk_score: float
    investment_count: int

    @property
    def risk_label(self) -> str:
        if self.risk_score < 25:
            return "Conservative"
        if self.risk_score < 50:
            return "Moderate"
        if self.risk_score < 75:
            return "Aggressive"
        return "Very Aggressive"

    @property
    def diversification_label(self) -> str:
        if self.diversification_score < 30:
            return "Poor"
        if self.diversification_score < 60:
            return "Fair"
        if self.diversification_score < 80:
            return "Good"
        return "Excellent"


@dataclass(frozen=True)
class AllocationData:
    type: InvestmentType
    percentage: float


def category_totals(expenses: Iterable[Expense]) -> Dict[ExpenseCategory, float]:
    totals: Dict[ExpenseCategory, float] = defaultdict(float)
    for e in expenses:
        totals[e.category] += e.amount
    return dict(totals)


def expenses_summary(expenses: Iterable[Expense], start: datetime, end: datetime) -> ExpensesSummary:
    in_period = tuple(iter_expenses(expenses, by_date_range(start, end)))
    breakdown = category_totals(in_period)
    top = max(breakdown, key=breakdown.get) if breakdown else None
    return ExpensesSummary(
        total_amount=sum(expense_amounts(in_period)),
        expense_count=len(in_period),
        category_breakdown=breakdown,
        top_category=top,
        start=start,
        end=end,
    )


def budget_performance(
    budgets: Iterable[Budget], expenses: Iterable[Expense], month: int, year: int
) -> BudgetPerformance:
    month_budgets = [b for b in budgets if b.month == month and b.year == year]
    month_expenses = tuple(iter_expenses(expenses, by_month(month, year)))

    performance: Dict[ExpenseCategory, CategoryBudgetPerformance] = {}
    for b in month_budgets:
        spent = sum(e.amount for e in month_expenses if e.category == b.category)
        performance[b.category] = CategoryBudgetPerformance(
            budget_amount=b.budget_amount,
            actual_spent=spent,
            is_over_budget=spent > b.budget_amount,
            percentage_used=spent / b.budget_amount * 100 if b.budget_amount > 0 else 0.0,
        )

    return BudgetPerformance(
        month=month,
        year=year,
        total_budget=sum(b.budget_amount for b in month_budgets),
        # every expense in the month counts, budgeted category or not
        total_spent=sum(expense_amounts(month_expenses)),
        category_performance=performance,
        over_budget_categories=sum(1 for p in performance.values() if p.is_over_budget),
    )


def spending_trend(
    expenses: Iterable[Expense],
    days: int = 30,
    category: Optional[ExpenseCategory] = None,
    now: Optional[datetime] = None,
) -> pd.DataFrame:
    """Daily spending over the last ``days`` days, one row per calendar day."""
    now = now or datetime.now()
    start = now - timedelta(days=days)
    index = pd.date_range(start=pd.Timestamp(start).normalize(), periods=days + 1, freq="D")

    rows = [
        (pd.Timestamp(e.date).normalize(), e.amount)
        for e in iter_expenses(expenses, by_date_range(start, now))
        if by_category(category)(e)
    ]
    if rows:
        daily = pd.DataFrame(rows, columns=["date", "amount"]).groupby("date")["amount"].sum()
        amounts = daily.reindex(index, fill_value=0.0).to_numpy(dtype=float)
    else:
        amounts = np.zeros(len(index))
    return pd.DataFrame({"date": index, "amount": amounts})


def monthly_spending(expenses: Iterable[Expense], year: Optional[int] = None) -> pd.DataFrame:
    year = year or datetime.now().year
    totals: Dict[int, float] = defaultdict(float)
    for e in expenses:
        if e.date.year == year:
            totals[e.date.month] += e.amount
    return pd.DataFrame({
        "month": list(range(1, 13)),
        "year": [year] * 12,
        "amount": [totals.get(m, 0.0) for m in range(1, 13)],
        "month_name": [calendar.month_name[m] for m in range(1, 13)],
    })


def diversification_score(portfolio: Portfolio) -> float:
    kinds = {h.type for h in portfolio.holdings}
    return len(kinds) / len(InvestmentType) * 100


def risk_score(portfolio: Portfolio) -> float:
    """Value-weighted risk tier as a percentage of the highest tier."""
    if not portfolio.holdings:
        return 0.0
    total = portfolio.total_value
    if total <= 0:
        return 0.0
    weighted = sum(h.total_value / total * h.risk_level.weight for h in portfolio.holdings)
    return weighted / RiskLevel.VERY_HIGH.weight * 100


def portfolio_metrics(portfolio: Portfolio) -> PortfolioMetrics:
    return PortfolioMetrics(
        total_value=portfolio.total_value,
        total_gain_loss=portfolio.total_gain_loss,
        total_gain_loss_percentage=portfolio.total_gain_loss_percentage,
        diversification_score=diversification_score(portfolio),
        risk_score=risk_score(portfolio),
        investment_count=len(portfolio.holdings),
    )


def allocation_data(portfolio: Portfolio) -> List[AllocationData]:
    allocation = portfolio.actual_allocation
    data = [
        AllocationData(kind, allocation.get(kind, 0.0))
        for kind in InvestmentType
        if allocation.get(kind, 0.0) > 0
    ]
    return sorted(data, key=lambda d: d.percentage, reverse=True)


def performance_history(
    portfolio: Portfolio,
    rng: np.random.Generator,
    days: int = 30,
    now: Optional[datetime] = None,
) -> pd.DataFrame:
    """Simulated daily values around today's value, oldest first.

    There is no price history on disk, so each point is the current value
    scaled by a random factor in [0.95, 1.05].
    """
    now = now or datetime.now()
    factors = 1.0 + rng.uniform(-0.05, 0.05, size=days + 1)
    dates = [now - timedelta(days=i) for i in range(days, -1, -1)]
    return pd.DataFrame({"date": pd.to_datetime(dates), "value": portfolio.total_value * factors})


def _title_words(title: str) -> List[str]:
    words = []
    for raw in title.lower().split():
        word = raw.strip(string.punctuation)
        if len(word) > 3 and word not in STOP_WORDS:
            words.append(word)
    return words


def trending_topics(
    articles: Sequence[NewsArticle], now: Optional[datetime] = None, limit: int = 10
) -> List[str]:
    """Words repeated across the last week's headlines, most frequent first."""
    now = now or datetime.now()
    cutoff = now - timedelta(days=7)
    counts: Counter = Counter()
    for a in articles:
        if a.published_date >= cutoff:
            counts.update(_title_words(a.title))
    repeated = [(word, n) for word, n in counts.most_common() if n >= 2]
    return [word.title() for word, _ in repeated[:limit]]
