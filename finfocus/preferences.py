"""Flat user preferences kept in ``preferences.json``."""

import logging
import re
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from finfocus.domain import ExpenseCategory, NewsCategory
from finfocus.errors import StorageError
from finfocus.export import settings_to_json
from finfocus.storage import JsonStore

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[A-Z0-9a-z._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,64}")


class AppTheme(Enum):
    SYSTEM = "system"
    LIGHT = "light"
    DARK = "dark"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class SupportedCurrency(Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"

    @property
    def symbol(self) -> str:
        return {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}[self.value]

    @property
    def display_name(self) -> str:
        return {
            "USD": "US Dollar ($)",
            "EUR": "Euro (€)",
            "GBP": "British Pound (£)",
            "JPY": "Japanese Yen (¥)",
        }[self.value]


class DataRetentionPeriod(Enum):
    ONE_MONTH = 30
    THREE_MONTHS = 90
    SIX_MONTHS = 180
    ONE_YEAR = 365
    TWO_YEARS = 730

    @property
    def display_name(self) -> str:
        return {
            30: "1 Month",
            90: "3 Months",
            180: "6 Months",
            365: "1 Year",
            730: "2 Years",
        }[self.value]


@dataclass(frozen=True)
class UserPreferences:
    has_completed_onboarding: bool = False
    preferred_currency: str = "USD"
    user_name: str = ""
    user_email: str = ""
    preferred_theme: str = "system"
    enable_notifications: bool = True
    enable_budget_alerts: bool = True
    enable_investment_alerts: bool = True
    budget_alert_threshold: float = 80.0   # percent of a budget
    show_news_on_startup: bool = False
    default_expense_category: str = ExpenseCategory.OTHER.value
    enable_biometric_auth: bool = False
    data_retention_period: int = 365       # days
    enable_analytics: bool = True
    preferred_news_categories: tuple[str, ...] = field(default_factory=tuple)
    auto_sync_enabled: bool = True
    last_sync_date: Optional[str] = None   # ISO-8601

    @property
    def should_show_budget_alert(self) -> bool:
        return self.enable_notifications and self.enable_budget_alerts

    @property
    def should_show_investment_alert(self) -> bool:
        return self.enable_notifications and self.enable_investment_alerts

    @property
    def news_categories(self) -> List[NewsCategory]:
        """Preferred categories; nothing chosen means all of them."""
        if not self.preferred_news_categories:
            return list(NewsCategory)
        known = {c.value: c for c in NewsCategory}
        return [known[v] for v in self.preferred_news_categories if v in known]

    @property
    def default_category(self) -> ExpenseCategory:
        try:
            return ExpenseCategory(self.default_expense_category)
        except ValueError:
            return ExpenseCategory.OTHER

    @property
    def currency_symbol(self) -> str:
        return _currency(self.preferred_currency).symbol

    @property
    def currency_display_name(self) -> str:
        return _currency(self.preferred_currency).display_name

    @property
    def theme_display_name(self) -> str:
        try:
            return AppTheme(self.preferred_theme).display_name
        except ValueError:
            return AppTheme.SYSTEM.display_name

    @property
    def retention_display_name(self) -> str:
        try:
            return DataRetentionPeriod(self.data_retention_period).display_name
        except ValueError:
            return DataRetentionPeriod.ONE_YEAR.display_name


def _currency(code: str) -> SupportedCurrency:
    try:
        return SupportedCurrency(code)
    except ValueError:
        return SupportedCurrency.USD


# field name -> exported settings key
SETTINGS_KEYS: Dict[str, str] = {
    "has_completed_onboarding": "hasCompletedOnboarding",
    "preferred_currency": "userPreferredCurrency",
    "enable_notifications": "enableNotifications",
    "enable_budget_alerts": "enableBudgetAlerts",
    "enable_investment_alerts": "enableInvestmentAlerts",
    "preferred_theme": "preferredTheme",
    "user_name": "userName",
    "user_email": "userEmail",
    "budget_alert_threshold": "budgetAlertThreshold",
    "show_news_on_startup": "showNewsOnStartup",
    "default_expense_category": "defaultExpenseCategory",
    "enable_biometric_auth": "enableBiometricAuth",
    "data_retention_period": "dataRetentionPeriod",
    "enable_analytics": "enableAnalytics",
    "preferred_news_categories": "preferredNewsCategories",
    "auto_sync_enabled": "autoSyncEnabled",
    "last_sync_date": "lastSyncDate",
}


def export_settings(prefs: UserPreferences) -> Dict[str, Any]:
    exported: Dict[str, Any] = {}
    for name, key in SETTINGS_KEYS.items():
        value = getattr(prefs, name)
        if name == "preferred_news_categories":
            value = ",".join(value)
        elif name == "last_sync_date":
            value = value or ""
        exported[key] = value
    return exported


def _coerce(default: Any, value: Any) -> Any:
    """Return ``value`` when it has the default's type, else the default."""
    if isinstance(default, bool):
        return value if isinstance(value, bool) else default
    if isinstance(default, float):
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        return float(value) if ok else default
    if isinstance(default, int):
        ok = isinstance(value, int) and not isinstance(value, bool)
        return value if ok else default
    if isinstance(default, str):
        return value if isinstance(value, str) else default
    return default


def import_settings(settings: Mapping[str, Any]) -> UserPreferences:
    """Build preferences from an exported mapping; bad or missing keys use defaults."""
    defaults = UserPreferences()
    values: Dict[str, Any] = {}
    for name, key in SETTINGS_KEYS.items():
        raw = settings.get(key)
        if name == "preferred_news_categories":
            text = raw if isinstance(raw, str) else ""
            values[name] = tuple(v for v in text.split(",") if v)
        elif name == "last_sync_date":
            values[name] = raw if isinstance(raw, str) and raw else None
        else:
            values[name] = _coerce(getattr(defaults, name), raw)
    return UserPreferences(**values)


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(email) is not None


def is_valid_user_name(name: str) -> bool:
    return len(name.strip()) >= 2


class PreferencesStore:
    """Loads and saves ``UserPreferences`` as one JSON document."""

    def __init__(self, path):
        self._store = JsonStore(path)

    def load(self) -> UserPreferences:
        data = self._store.read()
        if data is None:
            return UserPreferences()
        if not isinstance(data, dict):
            raise StorageError(f"Preferences in {self._store.path} are not an object", self._store.path)
        defaults = UserPreferences()
        values: Dict[str, Any] = {}
        for f in fields(UserPreferences):
            if f.name not in data:
                continue
            raw = data[f.name]
            if f.name == "preferred_news_categories":
                items = raw if isinstance(raw, list) else []
                values[f.name] = tuple(v for v in items if isinstance(v, str))
            elif f.name == "last_sync_date":
                values[f.name] = raw if isinstance(raw, str) else None
            else:
                values[f.name] = _coerce(getattr(defaults, f.name), raw)
        return UserPreferences(**values)

    def save(self, prefs: UserPreferences) -> UserPreferences:
        data = asdict(prefs)
        data["preferred_news_categories"] = list(prefs.preferred_news_categories)
        self._store.write(data)
        return prefs

    def update(self, **changes) -> UserPreferences:
        return self.save(replace(self.load(), **changes))

    def reset(self) -> UserPreferences:
        logger.info("Resetting preferences to defaults")
        return self.save(UserPreferences())

    def complete_onboarding(self) -> UserPreferences:
        return self.update(has_completed_onboarding=True)

    def reset_onboarding(self) -> UserPreferences:
        return self.update(has_completed_onboarding=False)

    def update_last_sync(self, now: Optional[datetime] = None) -> UserPreferences:
        return self.update(last_sync_date=(now or datetime.now()).isoformat())

    def export_settings(self) -> Dict[str, Any]:
        return export_settings(self.load())

    def export_json(self) -> str:
        return settings_to_json(self.export_settings())

    def import_settings(self, settings: Mapping[str, Any]) -> UserPreferences:
        return self.save(import_settings(settings))
