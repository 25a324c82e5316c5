"""Plain-dict encoding of domain records for the JSON data files.

Dates are ISO-8601 strings and enums are stored by their display value, so
the files stay readable and match what the export paths write.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

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


def _date(value: str) -> datetime:
    # "Z" suffix is not accepted by fromisoformat on older interpreters
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def expense_to_dict(e: Expense) -> Dict[str, Any]:
    return {
        "id": e.id,
        "title": e.title,
        "amount": e.amount,
        "category": e.category.value,
        "date": e.date.isoformat(),
        "notes": e.notes,
        "isRecurring": e.is_recurring,
        "recurringFrequency": e.recurring_frequency.value if e.recurring_frequency else None,
    }


def expense_from_dict(d: Dict[str, Any]) -> Expense:
    frequency = d.get("recurringFrequency")
    return Expense(
        id=d["id"],
        title=d["title"],
        amount=float(d["amount"]),
        category=ExpenseCategory(d["category"]),
        date=_date(d["date"]),
        notes=d.get("notes", ""),
        is_recurring=bool(d.get("isRecurring", False)),
        recurring_frequency=RecurringFrequency(frequency) if frequency else None,
    )


def budget_to_dict(b: Budget) -> Dict[str, Any]:
    return {
        "id": b.id,
        "category": b.category.value,
        "budgetAmount": b.budget_amount,
        "spentAmount": b.spent_amount,
        "month": b.month,
        "year": b.year,
    }


def budget_from_dict(d: Dict[str, Any]) -> Budget:
    return Budget(
        id=d["id"],
        category=ExpenseCategory(d["category"]),
        budget_amount=float(d["budgetAmount"]),
        spent_amount=float(d.get("spentAmount", 0.0)),
        month=int(d["month"]),
        year=int(d["year"]),
    )


def holding_to_dict(h: Holding) -> Dict[str, Any]:
    return {
        "id": h.id,
        "symbol": h.symbol,
        "name": h.name,
        "type": h.type.value,
        "shares": h.shares,
        "purchasePrice": h.purchase_price,
        "currentPrice": h.current_price,
        "purchaseDate": h.purchase_date.isoformat(),
        "riskLevel": h.risk_level.value,
        "notes": h.notes,
    }


def holding_from_dict(d: Dict[str, Any]) -> Holding:
    return Holding(
        id=d["id"],
        symbol=d["symbol"],
        name=d["name"],
        type=InvestmentType(d["type"]),
        shares=float(d["shares"]),
        purchase_price=float(d["purchasePrice"]),
        current_price=float(d["currentPrice"]),
        purchase_date=_date(d["purchaseDate"]),
        risk_level=RiskLevel(d.get("riskLevel", RiskLevel.MODERATE.value)),
        notes=d.get("notes", ""),
    )


def portfolio_to_dict(p: Portfolio) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "investments": [holding_to_dict(h) for h in p.holdings],
        "createdDate": p.created_date.isoformat(),
        "targetAllocation": {k.value: v for k, v in p.target_allocation.items()},
    }


def portfolio_from_dict(d: Dict[str, Any]) -> Portfolio:
    return Portfolio(
        id=d["id"],
        name=d["name"],
        holdings=tuple(holding_from_dict(h) for h in d.get("investments", [])),
        created_date=_date(d["createdDate"]),
        target_allocation={
            InvestmentType(k): float(v) for k, v in d.get("targetAllocation", {}).items()
        },
    )


def article_to_dict(a: NewsArticle) -> Dict[str, Any]:
    return {
        "id": a.id,
        "title": a.title,
        "summary": a.summary,
        "source": a.source,
        "publishedDate": a.published_date.isoformat(),
        "category": a.category.value,
        "imageURL": a.image_url,
        "articleURL": a.article_url,
        "isBookmarked": a.is_bookmarked,
    }


def article_from_dict(d: Dict[str, Any]) -> NewsArticle:
    return NewsArticle(
        id=d["id"],
        title=d["title"],
        summary=d["summary"],
        source=d["source"],
        published_date=_date(d["publishedDate"]),
        category=NewsCategory(d["category"]),
        image_url=d.get("imageURL"),
        article_url=d.get("articleURL"),
        is_bookmarked=bool(d.get("isBookmarked", False)),
    )


def encode_many(records: Iterable, encoder) -> List[Dict[str, Any]]:
    return [encoder(r) for r in records]


def decode_many(rows: Optional[List[Dict[str, Any]]], decoder) -> tuple:
    return tuple(decoder(r) for r in rows or [])
