import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

logger = logging.getLogger(__name__)

__all__ = [
    'Event', 'EventBus',
    'EXPENSES_CHANGED', 'BUDGETS_CHANGED', 'BUDGET_ALERT', 'PORTFOLIO_CHANGED',
    'NEWS_CHANGED', 'ERROR_RAISED', 'budget_alert_handler', 'register_default_handlers',
]


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    """Synchronous publish/subscribe hub that view models report changes through."""

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        logger.debug("Publishing %s to %d handler(s)", name, len(handlers))
        return [handler(event, payload) for handler in list(handlers)]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


EXPENSES_CHANGED = "EXPENSES_CHANGED"
BUDGETS_CHANGED = "BUDGETS_CHANGED"
BUDGET_ALERT = "BUDGET_ALERT"
PORTFOLIO_CHANGED = "PORTFOLIO_CHANGED"
NEWS_CHANGED = "NEWS_CHANGED"
ERROR_RAISED = "ERROR_RAISED"


def budget_alert_handler(event: Event, payload: dict) -> dict:
    """Turn a BUDGET_ALERT payload into a user-facing message."""
    category = payload.get("category", "")
    spent = payload.get("spent", 0.0)
    limit = payload.get("limit", 0.0)
    threshold = payload.get("threshold", 0.0)

    if limit > 0 and spent > limit:
        return {"alert": f"Budget exceeded for {category}: {spent:.2f} / {limit:.2f}"}
    if limit > 0:
        return {
            "alert": f"{category} has used {spent / limit * 100:.0f}% of its budget "
                     f"(alert threshold {threshold:.0f}%)"
        }
    return {}


def register_default_handlers(bus: EventBus) -> None:
    bus.subscribe(BUDGET_ALERT, budget_alert_handler)
