from pathlib import Path

import pytest

from finfocus.config import DEFAULT_DATA_DIR, load_settings

ENV_VARS = (
    "FINFOCUS_DATA_DIR",
    "FINFOCUS_LOG_LEVEL",
    "FINFOCUS_PRICE_REFRESH_SECONDS",
    "FINFOCUS_APP_VERSION",
)


def clear_env(monkeypatch):
    # setenv first so monkeypatch removes whatever load_dotenv sets
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults(tmp_path, monkeypatch):
    clear_env(monkeypatch)

    settings = load_settings(tmp_path / "missing.env")

    assert settings.data_dir == DEFAULT_DATA_DIR
    assert settings.log_level == "INFO"
    assert settings.price_refresh_seconds == 300.0
    assert settings.app_version == "1.0"


def test_env_file_values(tmp_path, monkeypatch):
    clear_env(monkeypatch)
    env_file = tmp_path / ".env"
    env_file.write_text(
        f"FINFOCUS_DATA_DIR={tmp_path / 'data'}\n"
        "FINFOCUS_LOG_LEVEL=debug\n"
        "FINFOCUS_PRICE_REFRESH_SECONDS=60\n",
        encoding="utf-8",
    )

    settings = load_settings(env_file)

    assert settings.data_dir == Path(tmp_path / "data")
    assert settings.log_level == "DEBUG"
    assert settings.price_refresh_seconds == 60.0


def test_environment_wins_over_env_file(tmp_path, monkeypatch):
    clear_env(monkeypatch)
    env_file = tmp_path / ".env"
    env_file.write_text("FINFOCUS_APP_VERSION=from-file\n", encoding="utf-8")
    monkeypatch.setenv("FINFOCUS_APP_VERSION", "from-env")

    assert load_settings(env_file).app_version == "from-env"


def test_bad_refresh_interval(tmp_path, monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("FINFOCUS_PRICE_REFRESH_SECONDS", "soon")

    with pytest.raises(ValueError):
        load_settings(tmp_path / "missing.env")
