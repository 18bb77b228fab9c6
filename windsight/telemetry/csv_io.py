"""
Telemetry CSV Import/Export

Format:
- Header row = parameter names (camelCase) in declaration order
- One record per row, comma-separated
- Numeric strings are parsed as numbers, everything else stays text
- Rows whose field count differs from the header are skipped
"""

import csv
import logging
import math
from typing import Any, Dict, List, Sequence

import pandas as pd

from .config import PARAMETER_NAMES
from .schemas import InvalidRecord, TelemetryRecord


logger = logging.getLogger(__name__)


class CsvFormatError(ValueError):
    """Raised when an uploaded CSV cannot be interpreted at all."""


def _coerce_cell(value: str) -> Any:
    """Parse a trimmed cell as a number when it is one, else keep the text."""
    text = value.strip()
    if not text:
        return text
    try:
        number = float(text)
    except ValueError:
        return text
    if not math.isfinite(number):
        return text
    return number


def parse_telemetry_csv(text: str) -> List[Dict[str, Any]]:
    """
    Parse CSV text into one dict per data row.

    Args:
        text: Full CSV document (header + rows)

    Returns:
        List of row dicts keyed by header name

    Raises:
        CsvFormatError: If there is no header plus at least one data row
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        raise CsvFormatError("File must contain headers and at least one data row")

    reader = csv.reader(lines)
    headers = [header.strip() for header in next(reader)]

    rows = []
    skipped = 0
    for values in reader:
        if len(values) != len(headers):
            skipped += 1
            continue
        rows.append({header: _coerce_cell(value) for header, value in zip(headers, values)})

    if skipped:
        logger.warning(f"Skipped {skipped} CSV row(s) with a field count mismatch")
    return rows


def load_records_from_csv(text: str) -> List[TelemetryRecord]:
    """
    Parse CSV text into validated TelemetryRecords.

    Rows that parse but fail validation are skipped with a warning.
    """
    records = []
    for index, row in enumerate(parse_telemetry_csv(text), start=1):
        try:
            records.append(TelemetryRecord.from_mapping(row))
        except InvalidRecord as e:
            logger.warning(f"Skipped CSV data row {index}: {e}")
    return records


def records_to_csv(records: Sequence[TelemetryRecord]) -> str:
    """Write records as CSV with the canonical header order."""
    frame = pd.DataFrame(
        [record.to_wire() for record in records],
        columns=list(PARAMETER_NAMES),
    )
    return frame.to_csv(index=False, lineterminator="\n")
