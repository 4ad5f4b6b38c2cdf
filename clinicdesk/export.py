"""Report CSV export and whole-file database backup."""
from __future__ import annotations

import csv
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .database import StorageError

logger = logging.getLogger(__name__)


def default_report_filename(now: Optional[datetime] = None) -> str:
    return f"SalesReport_{(now or datetime.now()):%Y%m%d}.csv"


def default_backup_filename(now: Optional[datetime] = None) -> str:
    return f"PatientManagement_Backup_{(now or datetime.now()):%Y%m%d_%H%M}.db"


def export_report_csv(path: Path, headers: Sequence[str], rows: Iterable[Sequence[object]]) -> Path:
    """Write a header row and one row per record; values are quoted where needed."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            writer.writerow(headers)
            count = 0
            for row in rows:
                writer.writerow(["" if value is None else value for value in row])
                count += 1
    except OSError as exc:
        logger.error("Report export to %s failed: %s", path, exc)
        raise StorageError(f"Error exporting report: {exc}") from exc
    logger.info("Exported %d report row(s) to %s", count, path)
    return path


def backup_database(source: Path, destination: Path) -> Path:
    """Copy the whole database file, replacing any existing destination."""
    source = Path(source)
    destination = Path(destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)
    except OSError as exc:
        logger.error("Backup of %s to %s failed: %s", source, destination, exc)
        raise StorageError(f"Error backing up database: {exc}") from exc
    logger.info("Backed up %s to %s", source, destination)
    return destination
