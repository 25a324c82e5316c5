"""User-facing exports: CSV renderings and the settings JSON dump."""

from typing import Any, Iterable, Mapping

import pandas as pd

from finfocus.domain import Expense, Holding

EXPENSE_COLUMNS = ["Date", "Title", "Amount", "Category", "Notes", "Recurring"]
PORTFOLIO_COLUMNS = [
    "Symbol", "Name", "Type", "Shares", "Purchase Price", "Current Price",
    "Total Value", "Gain/Loss", "Gain/Loss %", "Purchase Date",
]


def _no_commas(text: str) -> str:
    return text.replace(",", ";")


def format_shares(shares: float) -> str:
    """Share count with at most four decimals and no trailing zeros."""
    text = f"{shares:.4f}".rstrip("0").rstrip(".")
    return text or "0"


def expenses_to_csv(expenses: Iterable[Expense]) -> str:
    rows = [
        {
            "Date": e.date.strftime("%m/%d/%y"),
            "Title": _no_commas(e.title),
            "Amount": e.amount,
            "Category": e.category.value,
            "Notes": _no_commas(e.notes),
            "Recurring": "true" if e.is_recurring else "false",
        }
        for e in expenses
    ]
    frame = pd.DataFrame(rows, columns=EXPENSE_COLUMNS)
    return frame.to_csv(index=False, lineterminator="\n")


def holdings_to_csv(holdings: Iterable[Holding]) -> str:
    rows = [
        {
            "Symbol": h.symbol,
            "Name": h.name,
            "Type": h.type.value,
            "Shares": format_shares(h.shares),
            "Purchase Price": h.purchase_price,
            "Current Price": h.current_price,
            "Total Value": h.total_value,
            "Gain/Loss": h.gain_loss,
            "Gain/Loss %": f"{h.gain_loss_percentage:.2f}",
            "Purchase Date": h.purchase_date.isoformat(),
        }
        for h in holdings
    ]
    frame = pd.DataFrame(rows, columns=PORTFOLIO_COLUMNS)
    return frame.to_csv(index=False, lineterminator="\n")


def _json_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def settings_to_json(settings: Mapping[str, Any]) -> str:
    """Render flat settings as a JSON object by hand, keys sorted."""
    keys = sorted(settings)
    lines = ["{"]
    for index, key in enumerate(keys):
        line = f'  "{key}": {_json_scalar(settings[key])}'
        if index < len(keys) - 1:
            line += ","
        lines.append(line)
    lines.append("}")
    return "\n".join(lines)
