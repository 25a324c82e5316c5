"""Bundled first-launch data and the canned news generator."""

from datetime import datetime, timedelta
from typing import Optional

import numpy as np

from finfocus.domain import (
    Budget,
    Expense,
    ExpenseCategory,
    Holding,
    InvestmentType,
    NewsArticle,
    NewsCategory,
    Portfolio,
    RecurringFrequency,
    RiskLevel,
)


def _months_ago(now: datetime, months: int) -> datetime:
    year, month = divmod(now.month - 1 - months, 12)
    return now.replace(year=now.year + year, month=month + 1, day=min(now.day, 28))


def sample_expenses(now: Optional[datetime] = None) -> tuple[Expense, ...]:
    now = now or datetime.now()
    day = timedelta(days=1)
    return (
        Expense("Grocery Shopping", 85.50, ExpenseCategory.FOOD, now - day, notes="Weekly grocery run"),
        Expense("Gas Station", 45.00, ExpenseCategory.TRANSPORT, now - 2 * day),
        Expense("Netflix Subscription", 15.99, ExpenseCategory.ENTERTAINMENT, now - 3 * day,
                is_recurring=True, recurring_frequency=RecurringFrequency.MONTHLY),
        Expense("Coffee Shop", 12.75, ExpenseCategory.FOOD, now - day),
        Expense("Electricity Bill", 120.00, ExpenseCategory.UTILITIES, now - 5 * day,
                is_recurring=True, recurring_frequency=RecurringFrequency.MONTHLY),
        Expense("Book Purchase", 25.99, ExpenseCategory.EDUCATION, now),
        Expense("Emergency Fund", 500.00, ExpenseCategory.SAVINGS, now, notes="Monthly savings contribution"),
    )


SAMPLE_BUDGET_LIMITS = (
    (ExpenseCategory.FOOD, 400.00, 285.50),
    (ExpenseCategory.TRANSPORT, 200.00, 145.00),
    (ExpenseCategory.ENTERTAINMENT, 100.00, 65.99),
    (ExpenseCategory.UTILITIES, 300.00, 275.00),
    (ExpenseCategory.SHOPPING, 250.00, 180.00),
    (ExpenseCategory.HEALTHCARE, 150.00, 75.00),
    (ExpenseCategory.EDUCATION, 100.00, 25.99),
    (ExpenseCategory.SAVINGS, 1000.00, 500.00),
)


def sample_budgets(now: Optional[datetime] = None) -> tuple[Budget, ...]:
    now = now or datetime.now()
    return tuple(
        Budget(category, limit, now.month, now.year, spent_amount=spent)
        for category, limit, spent in SAMPLE_BUDGET_LIMITS
    )


def sample_portfolio(now: Optional[datetime] = None) -> Portfolio:
    now = now or datetime.now()
    holdings = (
        Holding("AAPL", "Apple Inc.", InvestmentType.STOCKS, 10.0, 150.00, 175.50,
                _months_ago(now, 3), RiskLevel.MODERATE, "Tech giant with strong fundamentals"),
        Holding("MSFT", "Microsoft Corporation", InvestmentType.STOCKS, 5.0, 300.00, 285.75,
                _months_ago(now, 2), RiskLevel.MODERATE),
        Holding("SPY", "SPDR S&P 500 ETF", InvestmentType.ETF, 20.0, 400.00, 425.30,
                _months_ago(now, 6), RiskLevel.LOW, "Diversified S&P 500 exposure"),
        Holding("BTC", "Bitcoin", InvestmentType.CRYPTO, 0.5, 45000.00, 52000.00,
                _months_ago(now, 4), RiskLevel.VERY_HIGH, "Digital gold hedge"),
        Holding("VTIAX", "Vanguard Total International Stock", InvestmentType.MUTUAL_FUNDS, 100.0, 25.50, 27.20,
                _months_ago(now, 8), RiskLevel.MODERATE),
        Holding("TLT", "iShares 20+ Year Treasury Bond", InvestmentType.BONDS, 15.0, 120.00, 115.75,
                _months_ago(now, 5), RiskLevel.LOW),
    )
    return Portfolio(
        name="My Investment Portfolio",
        holdings=holdings,
        created_date=now,
        target_allocation={
            InvestmentType.STOCKS: 60.0,
            InvestmentType.BONDS: 20.0,
            InvestmentType.ETF: 10.0,
            InvestmentType.CRYPTO: 5.0,
            InvestmentType.MUTUAL_FUNDS: 5.0,
        },
    )


def sample_news(now: Optional[datetime] = None) -> tuple[NewsArticle, ...]:
    now = now or datetime.now()
    hour = timedelta(hours=1)
    return (
        NewsArticle(
            "Federal Reserve Signals Potential Rate Cuts Amid Economic Uncertainty",
            "The Federal Reserve indicated it may consider lowering interest rates in response to "
            "recent economic indicators showing slower growth and inflation concerns.",
            "Financial Times", now - 2 * hour, NewsCategory.ECONOMY,
        ),
        NewsArticle(
            "Tech Stocks Rally as AI Investments Show Strong Returns",
            "Major technology companies see significant gains as artificial intelligence investments "
            "begin to pay off, with several reporting better-than-expected quarterly earnings.",
            "MarketWatch", now - 5 * hour, NewsCategory.MARKETS, is_bookmarked=True,
        ),
        NewsArticle(
            "Bitcoin Reaches New Monthly High Amid Institutional Adoption",
            "Bitcoin prices surge as more institutional investors add cryptocurrency to their "
            "portfolios, with several major corporations announcing Bitcoin treasury allocations.",
            "CoinDesk", now - 8 * hour, NewsCategory.CRYPTO,
        ),
        NewsArticle(
            "5 Essential Tips for Building an Emergency Fund in 2024",
            "Financial experts share practical strategies for building and maintaining an emergency "
            "fund that can weather economic uncertainties and unexpected expenses.",
            "NerdWallet", now - 24 * hour, NewsCategory.PERSONAL, is_bookmarked=True,
        ),
        NewsArticle(
            "Global Supply Chain Improvements Boost Manufacturing Stocks",
            "Manufacturing sector sees renewed optimism as supply chain disruptions ease, leading to "
            "increased investor confidence and stock price improvements.",
            "Reuters", now - 48 * hour, NewsCategory.BUSINESS,
        ),
    )


NEWS_TEMPLATES = {
    NewsCategory.MARKETS: (
        "Stock Market Reaches New Heights Amid Economic Recovery",
        "Tech Giants Lead Market Rally in Strong Trading Session",
        "Emerging Markets Show Signs of Resilience",
        "Bond Yields Rise as Investors Shift Risk Appetite",
    ),
    NewsCategory.ECONOMY: (
        "GDP Growth Exceeds Expectations in Latest Quarter",
        "Inflation Concerns Moderate as Supply Chains Stabilize",
        "Employment Numbers Show Continued Improvement",
        "Consumer Confidence Reaches Multi-Year High",
    ),
    NewsCategory.CRYPTO: (
        "Bitcoin Adoption Grows Among Institutional Investors",
        "Ethereum Network Upgrade Promises Better Efficiency",
        "Regulatory Clarity Boosts Cryptocurrency Market Sentiment",
        "DeFi Protocols Show Impressive Growth Numbers",
    ),
    NewsCategory.PERSONAL: (
        "Smart Budgeting Strategies for the Modern Family",
        "How to Build Wealth Through Consistent Investing",
        "Emergency Fund Essentials: What You Need to Know",
        "Retirement Planning Tips for Different Life Stages",
    ),
    NewsCategory.INVESTING: (
        "Dividend Investing Strategies Gain Popularity",
        "ESG Funds Continue to Attract Investor Interest",
        "Value vs Growth: Finding the Right Balance",
        "International Diversification Benefits Explained",
    ),
}

SUMMARY_TEMPLATES = (
    "Market analysts report positive trends as investors show renewed confidence in the financial "
    "sector. Key indicators suggest continued growth potential.",
    "Industry experts weigh in on recent developments, highlighting both opportunities and "
    "challenges facing investors in the current market environment.",
    "Economic data reveals significant insights into consumer behavior and spending patterns, "
    "providing valuable guidance for financial planning decisions.",
    "Financial advisors recommend strategic approaches to portfolio management, emphasizing the "
    "importance of diversification and long-term planning.",
    "Recent studies demonstrate the impact of global events on local markets, underscoring the "
    "need for adaptive investment strategies.",
)

NEWS_SOURCES = (
    "Financial Times", "Wall Street Journal", "Bloomberg", "MarketWatch",
    "Reuters", "CNBC", "Yahoo Finance", "Investopedia", "Morningstar",
    "The Economist", "Forbes", "Barron's",
)


def generate_news(rng: np.random.Generator, now: Optional[datetime] = None) -> tuple[NewsArticle, ...]:
    """Build a fresh shuffled batch: four articles per templated category."""
    now = now or datetime.now()
    articles = []
    for category, titles in NEWS_TEMPLATES.items():
        for index, title in enumerate(titles):
            articles.append(NewsArticle(
                title=title,
                summary=SUMMARY_TEMPLATES[rng.integers(len(SUMMARY_TEMPLATES))],
                source=NEWS_SOURCES[rng.integers(len(NEWS_SOURCES))],
                published_date=now - timedelta(hours=index + 1),
                category=category,
            ))
    order = rng.permutation(len(articles))
    return tuple(articles[i] for i in order)
