"""
History Module — Bounded Prediction Log

Public API:
- HistoryStore: FIFO ring buffer with CSV export
- HistoryEntry: One verdict + telemetry snapshot
"""

from .store import (
    DEFAULT_HISTORY_CAPACITY,
    EXPORT_COLUMNS,
    HistoryEntry,
    HistoryStore,
    export_filename,
    format_timestamp,
)

__all__ = [
    "DEFAULT_HISTORY_CAPACITY",
    "EXPORT_COLUMNS",
    "HistoryEntry",
    "HistoryStore",
    "export_filename",
    "format_timestamp",
]
