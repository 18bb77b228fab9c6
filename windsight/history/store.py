"""
Prediction History — Bounded In-Memory Log

Keeps the most recent verdicts together with the telemetry that produced
them. The store is a strict FIFO ring buffer: past capacity, the oldest
entry is evicted first.

The "Snapshot Rule": each entry holds its own deep copy of the record, so
later edits to the live telemetry never rewrite history.
"""

import itertools
import logging
import time
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Dict, List, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from windsight.rules.scorer import FaultLabel, Verdict
from windsight.telemetry.schemas import TelemetryRecord


logger = logging.getLogger(__name__)


DEFAULT_HISTORY_CAPACITY = 50

# Export columns: (header, source, decimals); decimals=None for text
EXPORT_COLUMNS = (
    ("Timestamp", "timestamp", None),
    ("Prediction", "prediction", None),
    ("Probability", "probability", 3),
    ("Confidence", "confidence", 3),
    ("Wind Speed", "wind_speed", 1),
    ("Generator Power", "generator_power", 1),
    ("Vibration", "vibration_levels", 1),
    ("Temperature", "component_temperatures", 1),
)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


class HistoryEntry(BaseModel):
    """One scored snapshot. Immutable; owned by the HistoryStore."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(..., description="Creation-time based, increasing within a store")
    timestamp: datetime
    label: FaultLabel
    probability: float
    confidence: float
    attribution: Dict[str, float] = Field(default_factory=dict)
    affected_components: List[str] = Field(default_factory=list)
    record: TelemetryRecord

    def export_row(self) -> List[str]:
        """Render this entry as one export row."""
        values = {
            "timestamp": format_timestamp(self.timestamp),
            "prediction": self.label.value,
            "probability": self.probability,
            "confidence": self.confidence,
            "wind_speed": self.record.wind_speed,
            "generator_power": self.record.generator_power,
            "vibration_levels": self.record.vibration_levels,
            "component_temperatures": self.record.component_temperatures,
        }
        row = []
        for _, source, decimals in EXPORT_COLUMNS:
            value = values[source]
            row.append(value if decimals is None else f"{value:.{decimals}f}")
        return row


class HistoryStore:
    """
    Bounded, ordered log of past verdicts.

    Usage:
        store = HistoryStore(capacity=50)
        store.record(verdict, telemetry)
        csv_text = store.export()
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self._entries: Deque[HistoryEntry] = deque(maxlen=capacity)
        self._sequence = itertools.count(1)

    def __len__(self) -> int:
        return len(self._entries)

    def next_id(self) -> str:
        """Epoch milliseconds plus a per-store sequence number."""
        return f"{int(time.time() * 1000)}-{next(self._sequence):06d}"

    def append(self, entry: HistoryEntry) -> None:
        """Append an entry, evicting the oldest one past capacity."""
        if len(self._entries) == self.capacity:
            logger.debug(f"History full ({self.capacity}); evicting {self._entries[0].id}")
        self._entries.append(entry)

    def record(self, verdict: Verdict, record: TelemetryRecord) -> HistoryEntry:
        """
        Build an entry from a verdict and the telemetry that produced it.

        Args:
            verdict: Scored verdict
            record: Telemetry snapshot (deep-copied into the entry)

        Returns:
            The appended HistoryEntry
        """
        entry = HistoryEntry(
            id=self.next_id(),
            timestamp=verdict.timestamp,
            label=verdict.label,
            probability=verdict.probability,
            confidence=verdict.confidence,
            attribution=dict(verdict.attribution),
            affected_components=list(verdict.affected_components),
            record=record.model_copy(deep=True),
        )
        self.append(entry)
        return entry

    def clear(self) -> None:
        """Empty the whole store at once."""
        self._entries.clear()
        logger.info("Prediction history cleared")

    def entries(self) -> List[HistoryEntry]:
        """All entries, oldest first."""
        return list(self._entries)

    def latest(self) -> Optional[HistoryEntry]:
        return self._entries[-1] if self._entries else None

    def summary(self) -> Dict[str, int]:
        """Entry counts per label plus the total."""
        counts = {label.value: 0 for label in FaultLabel}
        for entry in self._entries:
            counts[entry.label.value] += 1
        counts["total"] = len(self._entries)
        return counts

    def export(self) -> str:
        """
        Export the history as CSV, newest entry first.

        Probability and confidence use 3 decimals, telemetry values 1.
        An empty store yields the header row only. Every row ends with
        a newline, the last one included (the dashboard download joined
        rows without a trailing one).
        """
        frame = pd.DataFrame(
            [entry.export_row() for entry in reversed(self._entries)],
            columns=[header for header, _, _ in EXPORT_COLUMNS],
        )
        return frame.to_csv(index=False, lineterminator="\n")


def export_filename(now: Optional[datetime] = None) -> str:
    """Download name: turbine_predictions_YYYY-MM-DD.csv"""
    now = now or datetime.now(timezone.utc)
    return f"turbine_predictions_{now.strftime('%Y-%m-%d')}.csv"
