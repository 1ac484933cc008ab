"""Append-only CSV error log for a provisioning run."""

from __future__ import annotations

import csv
import logging
import os
from pathlib import Path

from .models import ErrorRecord

logger = logging.getLogger(__name__)

ERROR_LOG_HEADER = ["Owner", "MailNickName", "DisplayName", "SourceM365Group", "Error"]


class ErrorLog:
    """Writes one CSV line per failure record.

    The file is recreated (header only) by :meth:`open` at the start of a run.
    Each :meth:`append` is flushed to disk before returning, so a crash can
    duplicate lines on re-run but never lose one that was reported written.
    Write failures are logged and never raised to the caller.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.records: list[ErrorRecord] = []
        self.write_failures = 0

    @property
    def count(self) -> int:
        return len(self.records)

    def open(self) -> None:
        """Recreate the log file with just the header row."""
        self.records = []
        self.write_failures = 0
        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", newline="", encoding="utf-8") as f:
                csv.writer(f, quoting=csv.QUOTE_ALL).writerow(ERROR_LOG_HEADER)
        except OSError as e:
            self.write_failures += 1
            logger.error("Could not create error log %s: %s", self.path, e)

    def append(self, record: ErrorRecord) -> None:
        """Append *record* as one quoted CSV line."""
        self.records.append(record)
        log = logger.error if record.kind.fatal else logger.warning
        log("  [%s] %s", record.kind.value, record.message)
        try:
            with open(self.path, "a", newline="", encoding="utf-8") as f:
                csv.writer(f, quoting=csv.QUOTE_ALL).writerow(record.as_csv_row())
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            self.write_failures += 1
            logger.error("Could not write to error log %s: %s", self.path, e)
