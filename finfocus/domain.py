from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional
from uuid import uuid4


def new_id() -> str:
    return str(uuid4())


class ExpenseCategory(Enum):
    FOOD = "Food & Dining"
    TRANSPORT = "Transportation"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    UTILITIES = "Utilities"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    SAVINGS = "Savings"
    OTHER = "Other"


class RecurringFrequency(Enum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


class InvestmentType(Enum):
    STOCKS = "Stocks"
    BONDS = "Bonds"
    ETF = "ETF"
    MUTUAL_FUNDS = "Mutual Funds"
    CRYPTO = "Cryptocurrency"
    REAL_ESTATE = "Real Estate"
    COMMODITIES = "Commodities"
    CASH = "Cash"


class RiskLevel(Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "Very High"

    @property
    def weight(self) -> float:
        return RISK_WEIGHTS[self]


RISK_WEIGHTS: Dict[RiskLevel, float] = {
    RiskLevel.LOW: 1.0,
    RiskLevel.MODERATE: 2.0,
    RiskLevel.HIGH: 3.0,
    RiskLevel.VERY_HIGH: 4.0,
}


class NewsCategory(Enum):
    MARKETS = "Markets"
    ECONOMY = "Economy"
    CRYPTO = "Cryptocurrency"
    PERSONAL = "Personal Finance"
    INVESTING = "Investing"
    BUSINESS = "Business"
    TECHNOLOGY = "Technology"
    GLOBAL = "Global"


@dataclass(frozen=True)
class Expense:
    title: str
    amount: float
    category: ExpenseCategory
    date: datetime
    notes: str = ""
    is_recurring: bool = False
    recurring_frequency: Optional[RecurringFrequency] = None
    id: str = field(default_factory=new_id)


# A spending limit for one (category, month, year) bucket
@dataclass(frozen=True)
class Budget:
    category: ExpenseCategory
    budget_amount: float
    month: int
    year: int
    spent_amount: float = 0.0   # recomputed from expenses
    id: str = field(default_factory=new_id)

    @property
    def remaining_amount(self) -> float:
        return self.budget_amount - self.spent_amount

    @property
    def percentage_used(self) -> float:
        """Share of the budget spent, clamped to 1.0; zero for an empty budget."""
        if self.budget_amount <= 0:
            return 0.0
        return min(self.spent_amount / self.budget_amount, 1.0)

    @property
    def is_over_budget(self) -> bool:
        return self.spent_amount > self.budget_amount


@dataclass(frozen=True)
class Holding:
    symbol: str
    name: str
    type: InvestmentType
    shares: float
    purchase_price: float
    current_price: float
    purchase_date: datetime
    risk_level: RiskLevel = RiskLevel.MODERATE
    notes: str = ""
    id: str = field(default_factory=new_id)

    @property
    def total_value(self) -> float:
        return self.shares * self.current_price

    @property
    def total_cost(self) -> float:
        return self.shares * self.purchase_price

    @property
    def gain_loss(self) -> float:
        return self.total_value - self.total_cost

    @property
    def gain_loss_percentage(self) -> float:
        if self.total_cost <= 0:
            return 0.0
        return self.gain_loss / self.total_cost * 100

    @property
    def is_profit(self) -> bool:
        return self.gain_loss > 0


@dataclass(frozen=True)
class Portfolio:
    name: str
    holdings: tuple[Holding, ...] = ()
    created_date: datetime = field(default_factory=datetime.now)
    target_allocation: Dict[InvestmentType, float] = field(default_factory=dict)  # percent per type
    id: str = field(default_factory=new_id)

    @property
    def total_value(self) -> float:
        return sum(h.total_value for h in self.holdings)

    @property
    def total_cost(self) -> float:
        return sum(h.total_cost for h in self.holdings)

    @property
    def total_gain_loss(self) -> float:
        return self.total_value - self.total_cost

    @property
    def total_gain_loss_percentage(self) -> float:
        if self.total_cost <= 0:
            return 0.0
        return self.total_gain_loss / self.total_cost * 100

    @property
    def is_profit(self) -> bool:
        return self.total_gain_loss > 0

    @property
    def actual_allocation(self) -> Dict[InvestmentType, float]:
        """Percent of total value held in each investment type."""
        total = self.total_value
        if total <= 0:
            return {}
        allocation: Dict[InvestmentType, float] = {}
        for kind in InvestmentType:
            kind_value = sum(h.total_value for h in self.holdings if h.type == kind)
            allocation[kind] = kind_value / total * 100
        return allocation

    @property
    def top_performers(self) -> tuple[Holding, ...]:
        winners = sorted(
            (h for h in self.holdings if h.is_profit),
            key=lambda h: h.gain_loss_percentage,
            reverse=True,
        )
        return tuple(winners[:3])

    @property
    def worst_performers(self) -> tuple[Holding, ...]:
        losers = sorted(
            (h for h in self.holdings if not h.is_profit),
            key=lambda h: h.gain_loss_percentage,
        )
        return tuple(losers[:3])


@dataclass(frozen=True)
class NewsArticle:
    title: str
    summary: str
    source: str
    published_date: datetime
    category: NewsCategory
    image_url: Optional[str] = None
    article_url: Optional[str] = None
    is_bookmarked: bool = False   # the only field toggled after creation
    id: str = field(default_factory=new_id)
