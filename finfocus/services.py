"""Async data services over the JSON files.

Every file read and write runs in a worker thread (``asyncio.to_thread``) so
callers on the event loop are never blocked by disk I/O. Missing files fall
back to the bundled sample data.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np

from finfocus import analytics
from finfocus.codec import (
    article_from_dict,
    article_to_dict,
    budget_from_dict,
    budget_to_dict,
    decode_many,
    encode_many,
    expense_from_dict,
    expense_to_dict,
    portfolio_from_dict,
    portfolio_to_dict,
)
from finfocus.domain import (
    Budget,
    Expense,
    Holding,
    NewsArticle,
    NewsCategory,
    Portfolio,
)
from finfocus.errors import StorageError
from finfocus.export import expenses_to_csv
from finfocus.filters import matches_text
from finfocus.functional import find_by_id
from finfocus.news import NewsTimeframe
from finfocus.samples import (
    generate_news,
    sample_budgets,
    sample_expenses,
    sample_news,
    sample_portfolio,
)
from finfocus.storage import (
    BACKUP_DIR,
    BOOKMARKS_FILE,
    BUDGETS_FILE,
    EXPENSES_FILE,
    NEWS_FILE,
    PORTFOLIO_FILE,
    JsonStore,
    format_size,
)
from finfocus.transforms import (
    add_record,
    prune_expenses,
    prune_news,
    remove_by_id,
    replace_by_id,
    set_bookmark,
    toggle_bookmark,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _decode(store: JsonStore, decode: Callable[[Any], Any], data: Any):
    try:
        return decode(data)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.error("Malformed data in %s: %s", store.path, e)
        raise StorageError(f"Could not decode {store.path.name}: {e}", store.path) from e


@dataclass(frozen=True)
class FinanceDataExport:
    expenses: Tuple[Expense, ...]
    budgets: Tuple[Budget, ...]
    portfolio: Optional[Portfolio]
    export_date: datetime
    app_version: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "expenses": encode_many(self.expenses, expense_to_dict),
            "budgets": encode_many(self.budgets, budget_to_dict),
            "portfolio": portfolio_to_dict(self.portfolio) if self.portfolio else None,
            "exportDate": self.export_date.isoformat(),
            "appVersion": self.app_version,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FinanceDataExport":
        portfolio = d.get("portfolio")
        return cls(
            expenses=decode_many(d.get("expenses"), expense_from_dict),
            budgets=decode_many(d.get("budgets"), budget_from_dict),
            portfolio=portfolio_from_dict(portfolio) if portfolio else None,
            export_date=datetime.fromisoformat(d["exportDate"]),
            app_version=d.get("appVersion", "1.0"),
        )


@dataclass(frozen=True)
class NewsDataExport:
    articles: Tuple[NewsArticle, ...]
    bookmarked_articles: Tuple[NewsArticle, ...]
    export_date: datetime
    app_version: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "articles": encode_many(self.articles, article_to_dict),
            "bookmarkedArticles": encode_many(self.bookmarked_articles, article_to_dict),
            "exportDate": self.export_date.isoformat(),
            "appVersion": self.app_version,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "NewsDataExport":
        return cls(
            articles=decode_many(d.get("articles"), article_from_dict),
            bookmarked_articles=decode_many(d.get("bookmarkedArticles"), article_from_dict),
            export_date=datetime.fromisoformat(d["exportDate"]),
            app_version=d.get("appVersion", "1.0"),
        )


class FinanceDataService:
    """Expenses, budgets and the portfolio, one JSON file each."""

    def __init__(self, data_dir, app_version: str = "1.0", clock: Clock = datetime.now):
        self.data_dir = Path(data_dir)
        self.app_version = app_version
        self._clock = clock
        self._expenses = JsonStore(self.data_dir / EXPENSES_FILE)
        self._budgets = JsonStore(self.data_dir / BUDGETS_FILE)
        self._portfolio = JsonStore(self.data_dir / PORTFOLIO_FILE)

    # --- expenses

    async def load_expenses(self) -> Tuple[Expense, ...]:
        rows = await asyncio.to_thread(self._expenses.read)
        if rows is None:
            logger.info("%s not found, using sample expenses", self._expenses.path)
            return sample_expenses(self._clock())
        return _decode(self._expenses, lambda r: decode_many(r, expense_from_dict), rows)

    async def save_expenses(self, expenses: Iterable[Expense]) -> None:
        await asyncio.to_thread(self._expenses.write, encode_many(expenses, expense_to_dict))

    async def add_expense(self, expense: Expense) -> Tuple[Expense, ...]:
        expenses = add_record(await self.load_expenses(), expense)
        await self.save_expenses(expenses)
        return expenses

    async def update_expense(self, expense: Expense) -> Tuple[Expense, ...]:
        expenses = await self.load_expenses()
        if find_by_id(expenses, expense.id).is_none():
            return expenses
        expenses = replace_by_id(expenses, expense)
        await self.save_expenses(expenses)
        return expenses

    async def delete_expense(self, expense_id: str) -> Tuple[Expense, ...]:
        expenses = remove_by_id(await self.load_expenses(), expense_id)
        await self.save_expenses(expenses)
        return expenses

    # --- budgets

    async def load_budgets(self) -> Tuple[Budget, ...]:
        rows = await asyncio.to_thread(self._budgets.read)
        if rows is None:
            logger.info("%s not found, using sample budgets", self._budgets.path)
            return sample_budgets(self._clock())
        return _decode(self._budgets, lambda r: decode_many(r, budget_from_dict), rows)

    async def save_budgets(self, budgets: Iterable[Budget]) -> None:
        await asyncio.to_thread(self._budgets.write, encode_many(budgets, budget_to_dict))

    async def add_budget(self, budget: Budget) -> Tuple[Budget, ...]:
        budgets = add_record(await self.load_budgets(), budget)
        await self.save_budgets(budgets)
        return budgets

    async def update_budget(self, budget: Budget) -> Tuple[Budget, ...]:
        budgets = await self.load_budgets()
        if find_by_id(budgets, budget.id).is_none():
            return budgets
        budgets = replace_by_id(budgets, budget)
        await self.save_budgets(budgets)
        return budgets

    async def delete_budget(self, budget_id: str) -> Tuple[Budget, ...]:
        budgets = remove_by_id(await self.load_budgets(), budget_id)
        await self.save_budgets(budgets)
        return budgets

    # --- portfolio

    async def load_portfolio(self) -> Portfolio:
        data = await asyncio.to_thread(self._portfolio.read)
        if data is None:
            logger.info("%s not found, using sample portfolio", self._portfolio.path)
            return sample_portfolio(self._clock())
        return _decode(self._portfolio, portfolio_from_dict, data)

    async def save_portfolio(self, portfolio: Portfolio) -> None:
        await asyncio.to_thread(self._portfolio.write, portfolio_to_dict(portfolio))

    async def _save_holdings(self, portfolio: Portfolio, holdings: Tuple[Holding, ...]) -> Portfolio:
        updated = replace(portfolio, holdings=holdings)
        await self.save_portfolio(updated)
        return updated

    async def add_holding(self, holding: Holding, portfolio: Portfolio) -> Portfolio:
        return await self._save_holdings(portfolio, add_record(portfolio.holdings, holding))

    async def update_holding(self, holding: Holding, portfolio: Portfolio) -> Portfolio:
        if find_by_id(portfolio.holdings, holding.id).is_none():
            return portfolio
        return await self._save_holdings(portfolio, replace_by_id(portfolio.holdings, holding))

    async def delete_holding(self, holding_id: str, portfolio: Portfolio) -> Portfolio:
        return await self._save_holdings(portfolio, remove_by_id(portfolio.holdings, holding_id))

    # --- analytics

    async def expenses_summary(self, start: datetime, end: datetime) -> analytics.ExpensesSummary:
        return analytics.expenses_summary(await self.load_expenses(), start, end)

    async def budget_performance(self, month: int, year: int) -> analytics.BudgetPerformance:
        budgets, expenses = await asyncio.gather(self.load_budgets(), self.load_expenses())
        return analytics.budget_performance(budgets, expenses, month, year)

    # --- export, import, maintenance

    async def export_all(self) -> FinanceDataExport:
        expenses, budgets, portfolio = await asyncio.gather(
            self.load_expenses(), self.load_budgets(), self.load_portfolio()
        )
        return FinanceDataExport(
            expenses=expenses,
            budgets=budgets,
            portfolio=portfolio,
            export_date=self._clock(),
            app_version=self.app_version,
        )

    async def import_data(self, data: FinanceDataExport) -> None:
        await self.save_expenses(data.expenses)
        await self.save_budgets(data.budgets)
        if data.portfolio is not None:
            await self.save_portfolio(data.portfolio)
        logger.info(
            "Imported %d expenses and %d budgets", len(data.expenses), len(data.budgets)
        )

    async def export_csv(self) -> str:
        return expenses_to_csv(await self.load_expenses())

    async def cleanup_old_data(self, days: int, now: Optional[datetime] = None) -> int:
        """Drop expenses older than ``days``; budgets and holdings are kept."""
        cutoff = (now or self._clock()) - timedelta(days=days)
        expenses = await self.load_expenses()
        kept = prune_expenses(expenses, cutoff)
        await self.save_expenses(kept)
        removed = len(expenses) - len(kept)
        logger.info("Removed %d expense(s) dated before %s", removed, cutoff.date())
        return removed

    async def reset_all(self) -> None:
        for store in (self._expenses, self._budgets, self._portfolio):
            await asyncio.to_thread(store.delete)
        logger.info("Deleted finance data in %s", self.data_dir)

    def data_size(self) -> str:
        total = sum(s.size() for s in (self._expenses, self._budgets, self._portfolio))
        return format_size(total)

    async def backup(self, now: Optional[datetime] = None) -> Path:
        stamp = (now or self._clock()).strftime("%Y%m%d-%H%M%S")
        path = self.data_dir / BACKUP_DIR / f"FinFocus_Backup_{stamp}.json"
        export = await self.export_all()
        await asyncio.to_thread(JsonStore(path).write, export.to_dict())
        logger.info("Backup written to %s", path)
        return path

    async def restore(self, path) -> FinanceDataExport:
        store = JsonStore(path)
        data = await asyncio.to_thread(store.read)
        if data is None:
            raise StorageError(f"Backup not found: {store.path}", store.path)
        export = _decode(store, FinanceDataExport.from_dict, data)
        await self.import_data(export)
        return export


class NewsService:
    """Local news feed with bookmarks; "fetching" regenerates canned articles."""

    def __init__(
        self,
        data_dir,
        rng: Optional[np.random.Generator] = None,
        app_version: str = "1.0",
        clock: Clock = datetime.now,
    ):
        self.data_dir = Path(data_dir)
        self.app_version = app_version
        self._rng = rng if rng is not None else np.random.default_rng()
        self._clock = clock
        self._news = JsonStore(self.data_dir / NEWS_FILE)
        self._bookmarks = JsonStore(self.data_dir / BOOKMARKS_FILE)

    async def load_news(self) -> Tuple[NewsArticle, ...]:
        rows = await asyncio.to_thread(self._news.read)
        if rows is None:
            logger.info("%s not found, seeding sample news", self._news.path)
            articles = sample_news(self._clock())
            await self.save_news(articles)
            return articles
        return _decode(self._news, lambda r: decode_many(r, article_from_dict), rows)

    async def save_news(self, articles: Iterable[NewsArticle]) -> None:
        await asyncio.to_thread(self._news.write, encode_many(articles, article_to_dict))

    async def fetch_latest(self) -> Tuple[NewsArticle, ...]:
        articles = generate_news(self._rng, self._clock())
        await self.save_news(articles)
        logger.info("Generated %d fresh articles", len(articles))
        return articles

    async def fetch_from_api(self, api_key: str, category: Optional[NewsCategory] = None):
        # No live integration: fall back to the generated feed
        return await self.fetch_latest()

    async def by_category(self, category: NewsCategory) -> List[NewsArticle]:
        return [a for a in await self.load_news() if a.category == category]

    async def search(self, query: str) -> List[NewsArticle]:
        match = matches_text(query, "title", "summary", "source")
        return [a for a in await self.load_news() if match(a)]

    async def bookmarked(self) -> List[NewsArticle]:
        return [a for a in await self.load_news() if a.is_bookmarked]

    async def _rewrite(self, article_id: str, change) -> Tuple[NewsArticle, ...]:
        articles = await self.load_news()
        if find_by_id(articles, article_id).is_none():
            return articles
        articles = change(articles)
        await self.save_news(articles)
        return articles

    async def toggle_bookmark(self, article_id: str) -> Tuple[NewsArticle, ...]:
        return await self._rewrite(article_id, lambda a: toggle_bookmark(a, article_id))

    async def add_bookmark(self, article_id: str) -> Tuple[NewsArticle, ...]:
        return await self._rewrite(article_id, lambda a: set_bookmark(a, article_id, True))

    async def remove_bookmark(self, article_id: str) -> Tuple[NewsArticle, ...]:
        return await self._rewrite(article_id, lambda a: set_bookmark(a, article_id, False))

    async def by_timeframe(self, timeframe: NewsTimeframe) -> List[NewsArticle]:
        cutoff = timeframe.cutoff(self._clock())
        recent = [a for a in await self.load_news() if a.published_date >= cutoff]
        return sorted(recent, key=lambda a: a.published_date, reverse=True)

    async def top_by_category(self, per_category: int = 5) -> Dict[NewsCategory, List[NewsArticle]]:
        articles = await self.load_news()
        newest_first = sorted(articles, key=lambda a: a.published_date, reverse=True)
        return {
            category: [a for a in newest_first if a.category == category][:per_category]
            for category in NewsCategory
        }

    async def trending_topics(self, now: Optional[datetime] = None) -> List[str]:
        return analytics.trending_topics(await self.load_news(), now or self._clock())

    async def for_preferences(self, categories: Iterable[NewsCategory]) -> List[NewsArticle]:
        wanted = set(categories)
        chosen = [a for a in await self.load_news() if a.category in wanted]
        return sorted(chosen, key=lambda a: a.published_date, reverse=True)

    async def recommended(self, read_articles: Iterable[NewsArticle], limit: int = 10) -> List[NewsArticle]:
        """Unread articles from the categories the reader has already opened."""
        read = list(read_articles)
        read_categories = {a.category for a in read}
        read_ids = {a.id for a in read}
        picks = [
            a for a in await self.load_news()
            if a.category in read_categories and a.id not in read_ids
        ]
        return sorted(picks, key=lambda a: a.published_date, reverse=True)[:limit]

    async def cleanup_old_news(self, days: int, now: Optional[datetime] = None) -> int:
        cutoff = (now or self._clock()) - timedelta(days=days)
        articles = await self.load_news()
        kept = prune_news(articles, cutoff)
        await self.save_news(kept)
        return len(articles) - len(kept)

    async def reset(self) -> None:
        await asyncio.to_thread(self._news.delete)
        await asyncio.to_thread(self._bookmarks.delete)

    async def export_news(self) -> NewsDataExport:
        articles = await self.load_news()
        return NewsDataExport(
            articles=articles,
            bookmarked_articles=tuple(a for a in articles if a.is_bookmarked),
            export_date=self._clock(),
            app_version=self.app_version,
        )

    async def import_news(self, data: NewsDataExport) -> None:
        await self.save_news(data.articles)
