"""Command line entry point for inspecting and maintaining FinFocus data."""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import replace
from datetime import date, datetime, time
from pathlib import Path
from typing import Iterable

from finfocus.config import Settings, configure_logging, load_settings
from finfocus.domain import NewsCategory
from finfocus.errors import FinFocusError
from finfocus.events import EventBus, register_default_handlers
from finfocus.periods import TimePeriod, last_month_range
from finfocus.preferences import PreferencesStore, UserPreferences
from finfocus.services import FinanceDataService, NewsService
from finfocus.storage import PREFERENCES_FILE
from finfocus.viewmodels import InvestmentManagerViewModel, SortOption

logger = logging.getLogger(__name__)

PERIOD_CHOICES = {
    "week": TimePeriod.THIS_WEEK,
    "month": TimePeriod.THIS_MONTH,
    "year": TimePeriod.THIS_YEAR,
    "all": TimePeriod.ALL,
}
SORT_CHOICES = {
    "name": SortOption.ALPHABETICAL,
    "value": SortOption.VALUE,
    "gain": SortOption.GAIN_LOSS,
    "gain-pct": SortOption.GAIN_LOSS_PERCENT,
    "date": SortOption.PURCHASE_DATE,
}
NEWS_CHOICES = {c.name.lower(): c for c in NewsCategory}


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="finfocus",
        description="Inspect and maintain the local FinFocus finance data.",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Override the data directory (default: FINFOCUS_DATA_DIR or ~/.finfocus).",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Read settings from this .env file instead of the default lookup.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the command's output to a file instead of printing to stdout.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    summary = commands.add_parser("summary", help="Spending summary for a period.")
    summary.add_argument("--period", choices=sorted(PERIOD_CHOICES), default="month")
    summary.add_argument(
        "--last-month",
        action="store_true",
        help="Summarise the previous calendar month instead of --period.",
    )
    summary.add_argument(
        "--as-of",
        type=date.fromisoformat,
        help="Report as if today were this date (YYYY-MM-DD).",
    )

    budgets = commands.add_parser("budgets", help="Budget performance for a month.")
    budgets.add_argument("--month", type=int, help="Month number (default: current month).")
    budgets.add_argument("--year", type=int, help="Year (default: current year).")

    portfolio = commands.add_parser("portfolio", help="Holdings and portfolio metrics.")
    portfolio.add_argument("--sort", choices=list(SORT_CHOICES), default="name")
    portfolio.add_argument("--search", default="", help="Only holdings whose name or symbol match.")
    portfolio.add_argument("--csv", action="store_true", help="Print the holdings as CSV.")
    portfolio.add_argument(
        "--simulate",
        type=int,
        default=0,
        metavar="STEPS",
        help="Run this many simulated price updates before reporting.",
    )

    news = commands.add_parser("news", help="List the local news feed.")
    news.add_argument("--category", choices=sorted(NEWS_CHOICES))
    news.add_argument("--search", default="")
    news.add_argument("--refresh", action="store_true", help="Regenerate the feed first.")
    news.add_argument("--bookmarked", action="store_true", help="Only bookmarked articles.")
    news.add_argument("--trending", action="store_true", help="Print trending topics instead.")

    commands.add_parser("export-csv", help="Expenses as CSV.")
    commands.add_parser("export-settings", help="User preferences as JSON.")
    commands.add_parser("backup", help="Write a full backup into the Backups folder.")

    restore = commands.add_parser("restore", help="Import a backup file.")
    restore.add_argument("path", type=Path)

    cleanup = commands.add_parser("cleanup", help="Drop old expenses and news.")
    cleanup.add_argument(
        "--days",
        type=int,
        help="Keep this many days (default: the data retention preference).",
    )

    reset = commands.add_parser("reset", help="Delete all finance and news data.")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset.")
    return parser.parse_args(argv)


def _money(prefs: UserPreferences, amount: float) -> str:
    return f"{prefs.currency_symbol}{amount:,.2f}"


def _period_bounds(args: argparse.Namespace, now: datetime):
    if args.as_of:
        now = datetime.combine(args.as_of, time.min)
    if args.last_month:
        start, end = last_month_range(now.date())
        return f"{start:%B %Y}", datetime.combine(start, time.min), datetime.combine(end, time.max)
    period = PERIOD_CHOICES[args.period]
    start, end = period.date_range(now)
    return period.value, start, end


async def _summary(args, finance: FinanceDataService, prefs: UserPreferences) -> str:
    label, start, end = _period_bounds(args, datetime.now())
    summary = await finance.expenses_summary(start, end)
    lines = [
        f"Spending summary: {label}",
        f"Total: {_money(prefs, summary.total_amount)} over {summary.expense_count} expense(s)",
        f"Average: {_money(prefs, summary.average_amount)}",
    ]
    if summary.top_category is not None:
        lines.append(f"Top category: {summary.top_category.value}")
    for category, amount in sorted(summary.category_breakdown.items(), key=lambda kv: -kv[1]):
        lines.append(f"  {category.value:<20} {_money(prefs, amount):>12}")
    return "\n".join(lines)


async def _budgets(args, finance: FinanceDataService, prefs: UserPreferences) -> str:
    today = datetime.now()
    month, year = args.month or today.month, args.year or today.year
    report = await finance.budget_performance(month, year)
    lines = [
        f"Budgets for {month:02d}/{year}",
        f"Budgeted {_money(prefs, report.total_budget)}, spent {_money(prefs, report.total_spent)} "
        f"({report.budget_utilization:.0f}%)",
    ]
    for category, perf in report.category_performance.items():
        flag = "  OVER" if perf.is_over_budget else ""
        lines.append(
            f"  {category.value:<20} {_money(prefs, perf.actual_spent):>12} / "
            f"{_money(prefs, perf.budget_amount):<12} {perf.percentage_used:5.1f}%{flag}"
        )
    if report.over_budget_categories:
        lines.append(f"{report.over_budget_categories} categor(ies) over budget")
    return "\n".join(lines)


async def _portfolio(args, investments: InvestmentManagerViewModel, prefs: UserPreferences) -> str:
    await investments.load()
    for _ in range(args.simulate):
        await investments.simulate_price_updates()
    if args.csv:
        return investments.export_portfolio_csv()

    investments.sort_option = SORT_CHOICES[args.sort]
    investments.search_text = args.search
    metrics = investments.portfolio_metrics
    lines = [
        f"{investments.portfolio.name}: {_money(prefs, metrics.total_value)} "
        f"({metrics.total_gain_loss_percentage:+.2f}%)",
        f"Risk: {metrics.risk_label} ({metrics.risk_score:.0f}), "
        f"diversification: {metrics.diversification_label} ({metrics.diversification_score:.0f})",
    ]
    for h in investments.sorted_holdings:
        lines.append(
            f"  {h.symbol:<6} {h.name:<32} {_money(prefs, h.total_value):>12} "
            f"{h.gain_loss_percentage:+7.2f}%"
        )
    return "\n".join(lines)


async def _news(args, news: NewsService) -> str:
    if args.refresh:
        await news.fetch_latest()
    if args.trending:
        return "\n".join(await news.trending_topics())

    if args.bookmarked:
        articles = await news.bookmarked()
    elif args.search:
        articles = await news.search(args.search)
    else:
        articles = list(await news.load_news())
    if args.category:
        articles = [a for a in articles if a.category == NEWS_CHOICES[args.category]]
    articles = sorted(articles, key=lambda a: a.published_date, reverse=True)
    return "\n".join(
        f"{a.published_date:%Y-%m-%d %H:%M}  [{a.category.value}] {a.title} ({a.source})"
        for a in articles
    )


async def _cleanup(args, finance: FinanceDataService, news: NewsService, prefs: UserPreferences) -> str:
    days = args.days if args.days is not None else prefs.data_retention_period
    removed_expenses = await finance.cleanup_old_data(days)
    removed_news = await news.cleanup_old_news(days)
    return f"Removed {removed_expenses} expense(s) and {removed_news} article(s) older than {days} days"


async def _dispatch(args: argparse.Namespace, settings: Settings) -> str:
    bus = EventBus()
    register_default_handlers(bus)

    prefs_store = PreferencesStore(settings.data_dir / PREFERENCES_FILE)
    prefs = prefs_store.load()
    finance = FinanceDataService(settings.data_dir, app_version=settings.app_version)
    news = NewsService(settings.data_dir, app_version=settings.app_version)

    if args.command == "summary":
        return await _summary(args, finance, prefs)
    if args.command == "budgets":
        return await _budgets(args, finance, prefs)
    if args.command == "portfolio":
        investments = InvestmentManagerViewModel(
            finance, news, bus, refresh_seconds=settings.price_refresh_seconds
        )
        return await _portfolio(args, investments, prefs)
    if args.command == "news":
        return await _news(args, news)
    if args.command == "export-csv":
        return await finance.export_csv()
    if args.command == "export-settings":
        return prefs_store.export_json()
    if args.command == "backup":
        path = await finance.backup()
        return f"Backup written to {path}"
    if args.command == "restore":
        export = await finance.restore(args.path)
        return (
            f"Restored {len(export.expenses)} expense(s) and {len(export.budgets)} budget(s) "
            f"from a backup taken {export.export_date:%Y-%m-%d %H:%M}"
        )
    if args.command == "cleanup":
        return await _cleanup(args, finance, news, prefs)
    if args.command == "reset":
        await finance.reset_all()
        await news.reset()
        prefs_store.reset()
        return f"All data in {settings.data_dir} was reset"
    raise FinFocusError(f"Unknown command: {args.command}")


def run(argv: Iterable[str] | None = None) -> str:
    args = parse_args(argv)
    if args.command == "reset" and not args.yes:
        raise SystemExit("Refusing to reset without --yes.")
    settings = load_settings(args.env_file)
    if args.data_dir:
        settings = replace(settings, data_dir=args.data_dir)
    configure_logging(settings.log_level)
    logger.debug("Using data directory %s", settings.data_dir)

    try:
        output_text = asyncio.run(_dispatch(args, settings))
    except FinFocusError as exc:
        raise SystemExit(f"finfocus: {exc}")

    if args.output:
        args.output.write_text(output_text + "\n", encoding="utf-8")
    else:
        print(output_text)
    return output_text


def main() -> None:
    run()


if __name__ == "__main__":
    main()
