# =============================================================================
# core/csv_store.py  —  Durable CSV storage for large result sets
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Writes a full result set to a timestamped CSV file and returns its path.
#   The renderer then shows a small sample plus this path instead of the
#   bulk rows.
#
# FILE LAYOUT:
#   ~/rice-stock-data/stock-data-2025-07-10T14-03-22.csv
#
#   - header row = the column list, in display order
#   - None / missing keys → empty field, booleans as true/false
#   - fields containing a comma, quote, or newline are quote-wrapped with
#     internal quotes doubled (csv.QUOTE_MINIMAL does exactly this)
# =============================================================================

import csv
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from core.models import Row

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / "rice-stock-data"
FILE_PREFIX = "stock-data"


def csv_filename(now: Optional[datetime] = None) -> str:
    """Build the timestamped file name, e.g. stock-data-2025-07-10T14-03-22.csv."""
    now = now or datetime.now(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    return f"{FILE_PREFIX}-{stamp}.csv"


def csv_value(value):
    """None → empty field, booleans in JSON spelling, everything else as-is."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class CsvResultStore:
    """Persists row sets as CSV files under a single directory."""

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir else DEFAULT_DATA_DIR

    def save(self, rows: Sequence[Row], columns: Sequence[str], now: Optional[datetime] = None) -> Path:
        """Write `rows` to a new CSV file and return its path."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._unique_path(csv_filename(now))

        with path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle, lineterminator="\n")
            writer.writerow(columns)
            for row in rows:
                writer.writerow([csv_value(row.get(column)) for column in columns])

        logger.info("Saved %d rows to %s", len(rows), path)
        return path

    def _unique_path(self, filename: str) -> Path:
        path = self.data_dir / filename
        suffix = 1
        while path.exists():
            stem = filename[: -len(".csv")]
            path = self.data_dir / f"{stem}-{suffix}.csv"
            suffix += 1
        return path
