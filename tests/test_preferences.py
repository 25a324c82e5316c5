import json
from datetime import datetime

import pytest

from finfocus.domain import ExpenseCategory, NewsCategory
from finfocus.errors import StorageError
from finfocus.preferences import (
    DataRetentionPeriod,
    PreferencesStore,
    SupportedCurrency,
    UserPreferences,
    export_settings,
    import_settings,
    is_valid_email,
    is_valid_user_name,
)


def test_defaults():
    prefs = UserPreferences()

    assert prefs.preferred_currency == "USD"
    assert prefs.budget_alert_threshold == 80.0
    assert prefs.data_retention_period == 365
    assert prefs.default_category == ExpenseCategory.OTHER
    assert prefs.news_categories == list(NewsCategory)
    assert prefs.should_show_budget_alert


def test_alerts_need_notifications():
    prefs = UserPreferences(enable_notifications=False)

    assert not prefs.should_show_budget_alert
    assert not prefs.should_show_investment_alert


def test_display_names():
    prefs = UserPreferences(preferred_currency="EUR", preferred_theme="dark", data_retention_period=90)

    assert prefs.currency_symbol == "€"
    assert prefs.currency_display_name == "Euro (€)"
    assert prefs.theme_display_name == "Dark"
    assert prefs.retention_display_name == "3 Months"
    assert UserPreferences(preferred_currency="XYZ").currency_symbol == "$"
    assert SupportedCurrency.JPY.symbol == "¥"
    assert DataRetentionPeriod.TWO_YEARS.display_name == "2 Years"


def test_news_categories_ignore_unknown_values():
    prefs = UserPreferences(preferred_news_categories=("Markets", "Gossip"))
    assert prefs.news_categories == [NewsCategory.MARKETS]


def test_export_settings_uses_camel_case():
    prefs = UserPreferences(user_name="Sam", preferred_news_categories=("Markets", "Economy"))

    exported = export_settings(prefs)

    assert exported["userName"] == "Sam"
    assert exported["userPreferredCurrency"] == "USD"
    assert exported["preferredNewsCategories"] == "Markets,Economy"
    assert exported["lastSyncDate"] == ""


def test_import_settings_falls_back_on_bad_types():
    prefs = import_settings({
        "userName": "Sam",
        "budgetAlertThreshold": "high",
        "dataRetentionPeriod": True,
        "enableNotifications": False,
        "preferredNewsCategories": "Markets,Crypto",
    })

    assert prefs.user_name == "Sam"
    assert prefs.budget_alert_threshold == 80.0
    assert prefs.data_retention_period == 365
    assert prefs.enable_notifications is False
    assert prefs.preferred_news_categories == ("Markets", "Crypto")
    assert import_settings({"budgetAlertThreshold": 90}).budget_alert_threshold == 90.0


def test_validation_helpers():
    assert is_valid_email("sam@example.com")
    assert not is_valid_email("sam@example")
    assert not is_valid_email("not an email")
    assert is_valid_user_name(" Jo ")
    assert not is_valid_user_name(" J ")


def test_store_load_missing_gives_defaults(tmp_path):
    assert PreferencesStore(tmp_path / "preferences.json").load() == UserPreferences()


def test_store_persists_updates(tmp_path):
    path = tmp_path / "preferences.json"
    store = PreferencesStore(path)

    store.update(user_name="Sam", preferred_news_categories=("Markets",))
    store.complete_onboarding()
    store.update_last_sync(datetime(2025, 5, 15, 10, 30))

    loaded = PreferencesStore(path).load()
    assert loaded.user_name == "Sam"
    assert loaded.preferred_news_categories == ("Markets",)
    assert loaded.has_completed_onboarding
    assert loaded.last_sync_date == "2025-05-15T10:30:00"

    assert not store.reset_onboarding().has_completed_onboarding
    assert store.reset() == UserPreferences()


def test_store_export_and_import_json(tmp_path):
    store = PreferencesStore(tmp_path / "preferences.json")
    store.update(preferred_currency="GBP", budget_alert_threshold=75.5)

    assert store.export_settings()["userPreferredCurrency"] == "GBP"
    exported = json.loads(store.export_json())
    assert exported["userPreferredCurrency"] == "GBP"
    assert exported["budgetAlertThreshold"] == 75.5
    assert exported["lastSyncDate"] == ""

    other = PreferencesStore(tmp_path / "other.json")
    assert other.import_settings(exported).preferred_currency == "GBP"
    assert other.load().budget_alert_threshold == 75.5


def test_store_load_replaces_mistyped_values(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text(json.dumps({
        "budget_alert_threshold": "high",
        "data_retention_period": 90,
        "preferred_news_categories": "Markets",
        "user_name": "Sam",
    }), encoding="utf-8")

    prefs = PreferencesStore(path).load()

    assert prefs.budget_alert_threshold == 80.0
    assert prefs.data_retention_period == 90
    assert prefs.preferred_news_categories == ()
    assert prefs.user_name == "Sam"


def test_store_load_rejects_non_object(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(StorageError):
        PreferencesStore(path).load()
