"""Runtime configuration read from the environment (and an optional .env file)."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DATA_DIR = Path.home() / ".finfocus"
DEFAULT_REFRESH_SECONDS = 300.0

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    log_level: str = "INFO"
    price_refresh_seconds: float = DEFAULT_REFRESH_SECONDS
    app_version: str = "1.0"


def load_settings(env_file=None) -> Settings:
    # Existing environment variables win over the .env file
    load_dotenv(env_file)

    data_dir = os.getenv("FINFOCUS_DATA_DIR")
    refresh = os.getenv("FINFOCUS_PRICE_REFRESH_SECONDS")
    try:
        refresh_seconds = float(refresh) if refresh else DEFAULT_REFRESH_SECONDS
    except ValueError:
        raise ValueError(
            f"FINFOCUS_PRICE_REFRESH_SECONDS must be a number, got {refresh!r}"
        ) from None

    return Settings(
        data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
        log_level=os.getenv("FINFOCUS_LOG_LEVEL", "INFO").upper(),
        price_refresh_seconds=refresh_seconds,
        app_version=os.getenv("FINFOCUS_APP_VERSION", "1.0"),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
