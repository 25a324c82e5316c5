import json
from datetime import date, datetime

import pytest

from finfocus.cli import _period_bounds, parse_args, run

NOW = datetime(2025, 5, 15, 10, 30)


def run_cli(tmp_path, *argv):
    return run(["--data-dir", str(tmp_path / "data"), "--env-file", str(tmp_path / "missing.env"), *argv])


def test_parse_args_requires_command():
    with pytest.raises(SystemExit):
        parse_args([])
    assert parse_args(["summary", "--period", "week"]).period == "week"


def test_export_csv_prints_samples(tmp_path, capsys):
    output = run_cli(tmp_path, "export-csv")

    assert output.splitlines()[0] == "Date,Title,Amount,Category,Notes,Recurring"
    assert len(output.splitlines()) == 8
    assert "Grocery Shopping" in capsys.readouterr().out


def test_summary_and_budgets(tmp_path):
    summary = run_cli(tmp_path, "summary", "--period", "all")
    assert summary.startswith("Spending summary: All Time")
    assert "over 7 expense(s)" in summary

    last_month = run_cli(tmp_path, "summary", "--last-month", "--as-of", "2025-03-15")
    assert last_month.startswith("Spending summary: February 2025")

    budgets = run_cli(tmp_path, "budgets")
    assert budgets.startswith("Budgets for ")
    assert "Food & Dining" in budgets


def test_portfolio_report_and_csv(tmp_path):
    report = run_cli(tmp_path, "portfolio", "--sort", "value")
    assert report.splitlines()[2].strip().startswith("BTC")

    csv = run_cli(tmp_path, "portfolio", "--csv", "--simulate", "2")
    assert csv.startswith("Symbol,Name,Type")
    assert (tmp_path / "data" / "portfolio.json").exists()


def test_news_listing(tmp_path):
    listing = run_cli(tmp_path, "news", "--category", "crypto")
    assert "CoinDesk" in listing
    assert len(listing.splitlines()) == 1

    refreshed = run_cli(tmp_path, "news", "--refresh")
    assert len(refreshed.splitlines()) == 20


def test_export_settings_is_json(tmp_path):
    settings = json.loads(run_cli(tmp_path, "export-settings"))
    assert settings["userPreferredCurrency"] == "USD"


def test_backup_restore_and_output_file(tmp_path):
    run_cli(tmp_path, "backup")
    backups = list((tmp_path / "data" / "Backups").glob("FinFocus_Backup_*.json"))
    assert len(backups) == 1

    out = tmp_path / "restore.txt"
    result = run_cli(tmp_path, "--output", str(out), "restore", str(backups[0]))
    assert result.startswith("Restored 7 expense(s)")
    assert out.read_text(encoding="utf-8").startswith("Restored")


def test_restore_missing_file_exits(tmp_path):
    with pytest.raises(SystemExit):
        run_cli(tmp_path, "restore", str(tmp_path / "missing.json"))


def test_cleanup_and_reset(tmp_path):
    assert run_cli(tmp_path, "cleanup", "--days", "30").startswith("Removed 0 expense(s)")

    with pytest.raises(SystemExit):
        run_cli(tmp_path, "reset")

    run_cli(tmp_path, "backup")
    assert run_cli(tmp_path, "reset", "--yes").startswith("All data in")
    assert not (tmp_path / "data" / "expenses.json").exists()


def test_as_of_applies_to_every_period():
    label, start, end = _period_bounds(parse_args(["summary", "--period", "month", "--as-of", "2025-03-15"]), NOW)
    assert (start, end.date()) == (datetime(2025, 3, 1), date(2025, 3, 31))

    _, start, _ = _period_bounds(parse_args(["summary", "--period", "week", "--as-of", "2025-03-15"]), NOW)
    assert start == datetime(2025, 3, 10)

    label, _, _ = _period_bounds(parse_args(["summary", "--last-month", "--as-of", "2025-03-15"]), NOW)
    assert label == "February 2025"
