"""Whole-document JSON files in the application's data directory."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from finfocus.errors import StorageError

logger = logging.getLogger(__name__)

EXPENSES_FILE = "expenses.json"
BUDGETS_FILE = "budgets.json"
PORTFOLIO_FILE = "portfolio.json"
NEWS_FILE = "news.json"
BOOKMARKS_FILE = "bookmarked_news.json"
PREFERENCES_FILE = "preferences.json"
BACKUP_DIR = "Backups"


class JsonStore:
    """One JSON document on disk, always rewritten in full."""

    def __init__(self, path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Optional[Any]:
        """Return the decoded document, or ``None`` when the file is missing."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to read %s: %s", self.path, e)
            raise StorageError(f"Could not read {self.path.name}: {e}", self.path) from e

    def write(self, data: Any) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # temp file in the same directory so the rename stays on one filesystem
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to write %s: %s", self.path, e)
            raise StorageError(f"Could not write {self.path.name}: {e}", self.path) from e
        logger.debug("Wrote %s", self.path)

    def delete(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not delete {self.path.name}: {e}", self.path) from e

    def size(self) -> int:
        try:
            return self.path.stat().st_size
        except FileNotFoundError:
            return 0


def format_size(num_bytes: int) -> str:
    """Human-readable byte count using decimal units ("1.2 KB")."""
    if num_bytes < 1000:
        return f"{num_bytes} bytes" if num_bytes != 1 else "1 byte"
    size = float(num_bytes)
    for unit in ("KB", "MB", "GB", "TB"):
        size /= 1000
        if size < 1000 or unit == "TB":
            return f"{size:.1f} {unit}"
    return f"{size:.1f} TB"
