"""Observable view models for the expense and investment screens.

State lives in plain attributes; every change is announced on an
``EventBus``. A failed save is recorded in ``error_message`` (and published
as ``ERROR_RAISED``) while the in-memory state keeps the change.
"""

import asyncio
import contextlib
import logging
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from finfocus import analytics
from finfocus.config import DEFAULT_REFRESH_SECONDS
from finfocus.domain import (
    Budget,
    Expense,
    ExpenseCategory,
    Holding,
    NewsArticle,
    NewsCategory,
    Portfolio,
)
from finfocus.errors import StorageError, ValidationError
from finfocus.events import (
    BUDGET_ALERT,
    BUDGETS_CHANGED,
    ERROR_RAISED,
    EXPENSES_CHANGED,
    NEWS_CHANGED,
    PORTFOLIO_CHANGED,
    EventBus,
)
from finfocus.export import holdings_to_csv
from finfocus.filters import all_of, by_category, by_date_range, matches_text
from finfocus.functional import validate_budget, validate_expense, validate_holding
from finfocus.lazy import iter_expenses, lazy_top_categories
from finfocus.periods import TimePeriod
from finfocus.preferences import UserPreferences
from finfocus.services import FinanceDataService, NewsService
from finfocus.transforms import (
    add_record,
    apply_expense_to_budget,
    bucket_spent,
    recompute_budgets,
    remove_by_id,
    replace_by_id,
    reprice_holdings,
)

logger = logging.getLogger(__name__)


def _checked(result):
    """Unwrap a validation ``Either`` or raise ``ValidationError``."""
    if result.is_left():
        raise ValidationError(result.get_error())
    return result.get_or_else(None)


class ExpenseTrackerViewModel:

    def __init__(
        self,
        service: FinanceDataService,
        bus: EventBus,
        preferences: Optional[UserPreferences] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.service = service
        self.bus = bus
        self.preferences = preferences or UserPreferences()
        self._clock = clock or datetime.now

        self.expenses: Tuple[Expense, ...] = ()
        self.budgets: Tuple[Budget, ...] = ()
        self.selected_period = TimePeriod.THIS_MONTH
        self.selected_category: Optional[ExpenseCategory] = None
        self.is_loading = False
        self.error_message: Optional[str] = None
        # budget ids already reported as over the alert threshold
        self._alerted: set = set()

    # --- loading and saving

    async def load(self) -> None:
        self.is_loading = True
        self.error_message = None
        try:
            self.expenses, self.budgets = await asyncio.gather(
                self.service.load_expenses(), self.service.load_budgets()
            )
        except StorageError as e:
            self._fail(f"Failed to load data: {e}")
        finally:
            self.is_loading = False
        self._alerted = {b.id for b in self.budgets if self._over_threshold(b)}
        self.bus.publish(EXPENSES_CHANGED, {"count": len(self.expenses)})

    async def refresh(self) -> None:
        await self.load()

    def _fail(self, message: str) -> None:
        logger.error(message)
        self.error_message = message
        self.bus.publish(ERROR_RAISED, {"message": message})

    def clear_error(self) -> None:
        self.error_message = None

    async def _save_expenses(self) -> None:
        try:
            await self.service.save_expenses(self.expenses)
        except StorageError as e:
            self._fail(f"Failed to save expenses: {e}")
        self.bus.publish(EXPENSES_CHANGED, {"count": len(self.expenses)})

    async def _save_budgets(self) -> None:
        try:
            await self.service.save_budgets(self.budgets)
        except StorageError as e:
            self._fail(f"Failed to save budgets: {e}")
        self.bus.publish(BUDGETS_CHANGED, {"count": len(self.budgets)})
        self.check_budget_alerts()

    # --- expenses

    async def add_expense(self, expense: Expense) -> None:
        _checked(validate_expense(expense))
        self.expenses = add_record(self.expenses, expense)
        self.budgets = apply_expense_to_budget(self.budgets, expense)
        await self._save_expenses()
        await self._save_budgets()

    async def update_expense(self, expense: Expense) -> None:
        _checked(validate_expense(expense))
        if not any(e.id == expense.id for e in self.expenses):
            return
        self.expenses = replace_by_id(self.expenses, expense)
        self.budgets = recompute_budgets(self.budgets, self.expenses)
        await self._save_expenses()
        await self._save_budgets()

    async def delete_expense(self, expense_id: str) -> None:
        self.expenses = remove_by_id(self.expenses, expense_id)
        self.budgets = recompute_budgets(self.budgets, self.expenses)
        await self._save_expenses()
        await self._save_budgets()

    async def delete_expenses_at(self, indices: Iterable[int]) -> None:
        """Delete by position in ``filtered_expenses``."""
        visible = self.filtered_expenses
        doomed = {visible[i].id for i in indices}
        self.expenses = tuple(e for e in self.expenses if e.id not in doomed)
        self.budgets = recompute_budgets(self.budgets, self.expenses)
        await self._save_expenses()
        await self._save_budgets()

    # --- budgets

    async def add_budget(self, budget: Budget) -> None:
        _checked(validate_budget(budget))
        budget = replace(budget, spent_amount=bucket_spent(budget, self.expenses))
        self.budgets = add_record(self.budgets, budget)
        await self._save_budgets()

    async def update_budget(self, budget: Budget) -> None:
        _checked(validate_budget(budget))
        budget = replace(budget, spent_amount=bucket_spent(budget, self.expenses))
        self.budgets = replace_by_id(self.budgets, budget)
        await self._save_budgets()

    async def delete_budget(self, budget_id: str) -> None:
        self.budgets = remove_by_id(self.budgets, budget_id)
        self._alerted.discard(budget_id)
        await self._save_budgets()

    # --- budget alerts

    def _over_threshold(self, budget: Budget) -> bool:
        return budget.percentage_used * 100 >= self.preferences.budget_alert_threshold

    def check_budget_alerts(self) -> List[dict]:
        """Publish a BUDGET_ALERT for each current-month budget that has just crossed the threshold."""
        results: List[dict] = []
        crossed = {b.id for b in self.budgets if self._over_threshold(b)}
        fresh = [b for b in self.current_month_budgets if b.id in crossed - self._alerted]
        self._alerted = crossed
        if not self.preferences.should_show_budget_alert:
            return results
        for b in fresh:
            logger.info("Budget alert for %s", b.category.value)
            results.extend(self.bus.publish(BUDGET_ALERT, {
                "category": b.category.value,
                "spent": b.spent_amount,
                "limit": b.budget_amount,
                "threshold": self.preferences.budget_alert_threshold,
            }))
        return results

    # --- derived state

    @property
    def filtered_expenses(self) -> List[Expense]:
        start, end = self.selected_period.date_range(self._clock())
        pred = all_of(by_date_range(start, end), by_category(self.selected_category))
        return sorted(iter_expenses(self.expenses, pred), key=lambda e: e.date, reverse=True)

    @property
    def total_expenses(self) -> float:
        return sum(e.amount for e in self.filtered_expenses)

    @property
    def expenses_by_category(self) -> Dict[ExpenseCategory, float]:
        return analytics.category_totals(self.filtered_expenses)

    @property
    def top_spending_categories(self) -> List[Tuple[ExpenseCategory, float]]:
        return list(lazy_top_categories(self.filtered_expenses, 5))

    @property
    def current_month_budgets(self) -> List[Budget]:
        now = self._clock()
        return [b for b in self.budgets if b.month == now.month and b.year == now.year]

    @property
    def over_budget_categories(self) -> List[Budget]:
        return [b for b in self.current_month_budgets if b.is_over_budget]

    @property
    def total_budget_amount(self) -> float:
        return sum(b.budget_amount for b in self.current_month_budgets)

    @property
    def total_spent_amount(self) -> float:
        return sum(b.spent_amount for b in self.current_month_budgets)

    @property
    def budget_utilization_percentage(self) -> float:
        """Spent over budgeted for the current month, as a ratio capped at 1.0."""
        total = self.total_budget_amount
        if total <= 0:
            return 0.0
        return min(self.total_spent_amount / total, 1.0)

    def spending_trend(self, days: int = 30) -> pd.DataFrame:
        return analytics.spending_trend(
            self.expenses, days, category=self.selected_category, now=self._clock()
        )

    def monthly_spending(self, year: Optional[int] = None) -> pd.DataFrame:
        return analytics.monthly_spending(self.expenses, year or self._clock().year)

    async def reset_all_data(self) -> None:
        try:
            await self.service.reset_all()
        except StorageError as e:
            self._fail(f"Failed to reset data: {e}")
            return
        await self.load()


class SortOption(Enum):
    ALPHABETICAL = "Alphabetical"
    VALUE = "Value"
    GAIN_LOSS = "Gain/Loss"
    GAIN_LOSS_PERCENT = "Gain/Loss %"
    PURCHASE_DATE = "Purchase Date"

    def sort(self, holdings: Iterable[Holding]) -> List[Holding]:
        if self is SortOption.ALPHABETICAL:
            return sorted(holdings, key=lambda h: h.name)
        key = {
            SortOption.VALUE: lambda h: h.total_value,
            SortOption.GAIN_LOSS: lambda h: h.gain_loss,
            SortOption.GAIN_LOSS_PERCENT: lambda h: h.gain_loss_percentage,
            SortOption.PURCHASE_DATE: lambda h: h.purchase_date,
        }[self]
        return sorted(holdings, key=key, reverse=True)


class InvestmentManagerViewModel:

    def __init__(
        self,
        finance_service: FinanceDataService,
        news_service: NewsService,
        bus: EventBus,
        rng: Optional[np.random.Generator] = None,
        refresh_seconds: float = DEFAULT_REFRESH_SECONDS,
    ):
        self.finance_service = finance_service
        self.news_service = news_service
        self.bus = bus
        self._rng = rng if rng is not None else np.random.default_rng()
        self.refresh_seconds = refresh_seconds

        self.portfolio = Portfolio(name="My Portfolio")
        self.news_articles: Tuple[NewsArticle, ...] = ()
        self.selected_news_category: Optional[NewsCategory] = None
        self.search_text = ""
        self.sort_option = SortOption.ALPHABETICAL
        self.is_loading = False
        self.error_message: Optional[str] = None
        self._refresh_task: Optional[asyncio.Task] = None

    async def load(self) -> None:
        self.is_loading = True
        self.error_message = None
        try:
            self.portfolio, self.news_articles = await asyncio.gather(
                self.finance_service.load_portfolio(), self.news_service.load_news()
            )
        except StorageError as e:
            self._fail(f"Failed to load data: {e}")
        finally:
            self.is_loading = False
        self.bus.publish(PORTFOLIO_CHANGED, {"count": len(self.portfolio.holdings)})
        self.bus.publish(NEWS_CHANGED, {"count": len(self.news_articles)})

    def _fail(self, message: str) -> None:
        logger.error(message)
        self.error_message = message
        self.bus.publish(ERROR_RAISED, {"message": message})

    def clear_error(self) -> None:
        self.error_message = None

    async def _save_portfolio(self) -> None:
        try:
            await self.finance_service.save_portfolio(self.portfolio)
        except StorageError as e:
            self._fail(f"Failed to save portfolio: {e}")
        self.bus.publish(PORTFOLIO_CHANGED, {"count": len(self.portfolio.holdings)})

    def _with_holdings(self, holdings: Tuple[Holding, ...]) -> None:
        self.portfolio = replace(self.portfolio, holdings=holdings)

    # --- holdings

    async def add_holding(self, holding: Holding) -> None:
        _checked(validate_holding(holding))
        self._with_holdings(add_record(self.portfolio.holdings, holding))
        await self._save_portfolio()

    async def update_holding(self, holding: Holding) -> None:
        _checked(validate_holding(holding))
        self._with_holdings(replace_by_id(self.portfolio.holdings, holding))
        await self._save_portfolio()

    async def delete_holding(self, holding_id: str) -> None:
        self._with_holdings(remove_by_id(self.portfolio.holdings, holding_id))
        await self._save_portfolio()

    async def delete_holdings_at(self, indices: Iterable[int]) -> None:
        """Delete by position in ``sorted_holdings``."""
        visible = self.sorted_holdings
        doomed = {visible[i].id for i in indices}
        self._with_holdings(tuple(h for h in self.portfolio.holdings if h.id not in doomed))
        await self._save_portfolio()

    # --- simulated prices

    async def simulate_price_updates(self) -> None:
        """Move every price by a random change within +/-2%, never below 0.01."""
        holdings = self.portfolio.holdings
        changes = self._rng.uniform(-0.02, 0.02, size=len(holdings))
        self._with_holdings(reprice_holdings(holdings, changes))
        await self._save_portfolio()

    async def _refresh_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.simulate_price_updates()

    def start_price_refresh(self, interval: Optional[float] = None) -> asyncio.Task:
        if self._refresh_task is not None and not self._refresh_task.done():
            return self._refresh_task
        interval = self.refresh_seconds if interval is None else interval
        logger.debug("Starting price refresh every %.1fs", interval)
        self._refresh_task = asyncio.create_task(self._refresh_loop(interval))
        return self._refresh_task

    async def stop_price_refresh(self) -> None:
        task, self._refresh_task = self._refresh_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    # --- derived state

    @property
    def sorted_holdings(self) -> List[Holding]:
        match = matches_text(self.search_text, "name", "symbol")
        return self.sort_option.sort(h for h in self.portfolio.holdings if match(h))

    @property
    def diversification_score(self) -> float:
        return analytics.diversification_score(self.portfolio)

    @property
    def risk_score(self) -> float:
        return analytics.risk_score(self.portfolio)

    @property
    def portfolio_metrics(self) -> analytics.PortfolioMetrics:
        return analytics.portfolio_metrics(self.portfolio)

    @property
    def allocation_data(self) -> List[analytics.AllocationData]:
        return analytics.allocation_data(self.portfolio)

    def performance_history(self, days: int = 30) -> pd.DataFrame:
        return analytics.performance_history(self.portfolio, self._rng, days)

    # --- news

    @property
    def filtered_news(self) -> List[NewsArticle]:
        pred = all_of(
            by_category(self.selected_news_category),
            matches_text(self.search_text, "title", "summary", "source"),
        )
        chosen = [a for a in self.news_articles if pred(a)]
        return sorted(chosen, key=lambda a: a.published_date, reverse=True)

    @property
    def bookmarked_news(self) -> List[NewsArticle]:
        return [a for a in self.news_articles if a.is_bookmarked]

    async def toggle_bookmark(self, article_id: str) -> None:
        try:
            self.news_articles = await self.news_service.toggle_bookmark(article_id)
        except StorageError as e:
            self._fail(f"Failed to update bookmark: {e}")
            return
        self.bus.publish(NEWS_CHANGED, {"count": len(self.news_articles)})

    async def refresh_news(self) -> None:
        self.is_loading = True
        try:
            self.news_articles = await self.news_service.fetch_latest()
        except StorageError as e:
            self._fail(f"Failed to refresh news: {e}")
        finally:
            self.is_loading = False
        self.bus.publish(NEWS_CHANGED, {"count": len(self.news_articles)})

    # --- maintenance

    async def reset_portfolio(self) -> None:
        self.portfolio = Portfolio(name="My Portfolio")
        await self._save_portfolio()

    def export_portfolio_csv(self) -> str:
        return holdings_to_csv(self.portfolio.holdings)
