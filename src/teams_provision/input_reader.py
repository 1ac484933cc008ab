"""CSV input loading."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from pydantic import ValidationError

from .models import ProvisionRow

logger = logging.getLogger(__name__)

INPUT_COLUMNS = [
    "Owner",
    "MailNickName",
    "SectionNumber",
    "Description",
    "CourseName",
    "DisplayName",
    "SourceM365Group",
]
REQUIRED_COLUMNS = {"MailNickName", "DisplayName"}


class InputError(Exception):
    """Raised when the input file is missing or structurally invalid."""


def load_rows(path: Path | str) -> list[ProvisionRow]:
    """Load provisioning rows from a CSV file with a header row.

    Handles a UTF-8 BOM (common in Excel exports) and strips whitespace
    from headers and values. Blank lines are skipped. Blank values in
    required columns are left for row validation to report.

    Raises:
        InputError: If the file is missing, has no header, or lacks a
            required column.
    """
    path = Path(path)
    if not path.is_file():
        raise InputError(f"Input file not found: {path}")

    rows: list[ProvisionRow] = []
    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise InputError(f"CSV file is empty or has no header: {path}")

        reader.fieldnames = [name.strip() for name in reader.fieldnames]
        missing = REQUIRED_COLUMNS - set(reader.fieldnames)
        if missing:
            raise InputError(f"CSV missing required columns {sorted(missing)} in {path}")

        unknown = set(reader.fieldnames) - set(INPUT_COLUMNS)
        if unknown:
            logger.debug("Ignoring unknown columns: %s", sorted(unknown))

        for raw in reader:
            values = {k: (v or "").strip() for k, v in raw.items() if k in INPUT_COLUMNS}
            if not any(values.values()):
                continue
            try:
                row = ProvisionRow.model_validate(
                    {**values, "line_number": reader.line_num}
                )
            except ValidationError as e:
                raise InputError(f"Malformed row at line {reader.line_num}: {e}") from e
            rows.append(row)

    logger.info("Loaded %d row(s) from %s", len(rows), path)
    return rows
